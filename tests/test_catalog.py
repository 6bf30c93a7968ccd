# tests/test_catalog.py
"""Проверка позиций заказа по каталогу."""

import uuid

import pytest
from sqlalchemy.exc import OperationalError

from app.errors import CatalogIntegrityError, CatalogLookupError
from app.schemas import SanitizedOrderItem
from app.services.catalog import CatalogChecker
from infrastructure.database.repositories import ProductRepository, VariantRepository


def item(product_id, variant_id=None, unit_price=15000, cost_price=10000, quantity=1):
    return SanitizedOrderItem(
        product_id=product_id,
        variant_id=variant_id,
        quantity=quantity,
        unit_price=unit_price,
        cost_price=cost_price,
        product_name="Test",
    )


async def test_active_product_passes(session, catalog):
    checked = await CatalogChecker(session).check([item(catalog.spoon, quantity=2)])

    assert checked[0].unit_price == 15000
    assert checked[0].cost_price == 10000
    assert checked[0].quantity == 2


async def test_unknown_product(session, catalog):
    missing = str(uuid.uuid4())

    with pytest.raises(CatalogIntegrityError) as exc:
        await CatalogChecker(session).check([item(catalog.spoon), item(missing)])

    assert exc.value.message == f"Product not found: {missing}"
    assert exc.value.status_code == 400


async def test_inactive_product(session, catalog):
    with pytest.raises(CatalogIntegrityError) as exc:
        await CatalogChecker(session).check([item(catalog.broken_kettle)])

    assert exc.value.message == "Product is not available: Choynak"


async def test_unknown_variant(session, catalog):
    missing = str(uuid.uuid4())

    with pytest.raises(CatalogIntegrityError) as exc:
        await CatalogChecker(session).check([item(catalog.spoon, variant_id=missing)])

    assert exc.value.message == f"Variant not found: {missing}"


async def test_inactive_variant(session, catalog):
    with pytest.raises(CatalogIntegrityError) as exc:
        await CatalogChecker(session).check([item(catalog.spoon, variant_id=catalog.spoon_gold)])

    assert "not available" in exc.value.message


async def test_variant_of_another_product_is_rejected(session, catalog):
    # Оба существуют и активны, но вариант принадлежит другому товару
    with pytest.raises(CatalogIntegrityError) as exc:
        await CatalogChecker(session).check([item(catalog.spoon, variant_id=catalog.pot_small)])

    assert exc.value.message == f"Variant does not belong to product: {catalog.pot_small}"


async def test_product_errors_come_before_variant_errors(session, catalog):
    with pytest.raises(CatalogIntegrityError) as exc:
        await CatalogChecker(session).check([
            item(catalog.spoon, variant_id=catalog.pot_small),
            item(catalog.broken_kettle),
        ])

    assert exc.value.message.startswith("Product is not available")


# ==========================================
# ЦЕНЫ
# ==========================================

async def test_client_prices_are_replaced_with_catalog_prices(session, catalog):
    checked = await CatalogChecker(session).check([
        item(catalog.spoon, unit_price=1, cost_price=1),
        item(catalog.spoon, variant_id=catalog.spoon_set, unit_price=1, cost_price=1),
        item(catalog.pot, variant_id=catalog.pot_small, unit_price=1, cost_price=1),
    ])

    assert [(i.unit_price, i.cost_price) for i in checked] == [
        (15000, 10000),
        (40000, 28000),
        (80000, 60000),  # вариант без своих цен -> цены товара
    ]


async def test_client_prices_kept_when_trusted(session, catalog):
    checked = await CatalogChecker(session, trust_client_prices=True).check([
        item(catalog.spoon, unit_price=1, cost_price=2),
    ])

    assert (checked[0].unit_price, checked[0].cost_price) == (1, 2)


# ==========================================
# ОШИБКИ БД
# ==========================================

async def test_products_lookup_failure(session, monkeypatch):
    async def broken(self, ids):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(ProductRepository, "get_many", broken)

    with pytest.raises(CatalogLookupError) as exc:
        await CatalogChecker(session).check([item(str(uuid.uuid4()))])

    assert exc.value.message == "Failed to validate products"
    assert exc.value.status_code == 500


async def test_variants_lookup_failure(session, catalog, monkeypatch):
    async def broken(self, ids):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(VariantRepository, "get_many", broken)

    with pytest.raises(CatalogLookupError) as exc:
        await CatalogChecker(session).check([item(catalog.spoon, variant_id=catalog.spoon_set)])

    assert exc.value.message == "Failed to validate variants"


async def test_repositories_fetch_in_batches(session, catalog):
    products = await ProductRepository(session).get_many([catalog.spoon, catalog.pot, catalog.spoon])
    variants = await VariantRepository(session).get_many([])

    assert set(products) == {catalog.spoon, catalog.pot}
    assert variants == {}
