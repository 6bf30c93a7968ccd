# app/services/catalog.py
"""
Проверка заказа по каталогу.

Браузеру нельзя верить: товар мог быть удалён или выключен,
вариант мог быть подставлен от другого товара, цена могла быть подделана.

Логика:
1. Один запрос - все товары заказа. Каждый должен существовать и быть активным.
2. Один запрос - все варианты заказа. Каждый должен существовать,
   быть активным и принадлежать товару из той же позиции.
3. Цены: если trust_client_prices=False (по умолчанию) - берём цены из каталога,
   цены из запроса игнорируем.

Первая же ошибка останавливает проверку, заказ не создаётся.
"""

from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import CatalogIntegrityError, CatalogLookupError
from app.schemas import SanitizedOrderItem
from infrastructure.database.models import Product, ProductVariant
from infrastructure.database.repositories import ProductRepository, VariantRepository
from infrastructure.logger import logger


class CatalogChecker:

    def __init__(self, session: AsyncSession, trust_client_prices: bool = False):
        self.products = ProductRepository(session)
        self.variants = VariantRepository(session)
        self.trust_client_prices = trust_client_prices

    async def check(self, items: List[SanitizedOrderItem]) -> List[SanitizedOrderItem]:
        """
        Проверить позиции и вернуть их с окончательными ценами.

        Кидает CatalogIntegrityError (400) или CatalogLookupError (500).
        """
        products = await self._load_products(items)
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                raise CatalogIntegrityError(f"Product not found: {item.product_id}")
            if not product.is_active:
                raise CatalogIntegrityError(f"Product is not available: {product.name}")

        variants = await self._load_variants(items)
        for item in items:
            if item.variant_id is None:
                continue
            variant = variants.get(item.variant_id)
            if variant is None:
                raise CatalogIntegrityError(f"Variant not found: {item.variant_id}")
            if not variant.is_active:
                raise CatalogIntegrityError(f"Product variant is not available: {item.variant_id}")
            if variant.product_id != item.product_id:
                raise CatalogIntegrityError(f"Variant does not belong to product: {item.variant_id}")

        if self.trust_client_prices:
            return items

        return [
            self._apply_catalog_price(item, products[item.product_id], variants.get(item.variant_id))
            for item in items
        ]

    # ==========================================
    # ЗАГРУЗКА ИЗ БД
    # ==========================================

    async def _load_products(self, items: List[SanitizedOrderItem]) -> Dict[str, Product]:
        try:
            return await self.products.get_many(item.product_id for item in items)
        except SQLAlchemyError as e:
            logger.error("products_lookup_failed", error=str(e))
            raise CatalogLookupError("Failed to validate products") from e

    async def _load_variants(self, items: List[SanitizedOrderItem]) -> Dict[str, ProductVariant]:
        variant_ids = [item.variant_id for item in items if item.variant_id]
        if not variant_ids:
            return {}

        try:
            return await self.variants.get_many(variant_ids)
        except SQLAlchemyError as e:
            logger.error("variants_lookup_failed", error=str(e))
            raise CatalogLookupError("Failed to validate variants") from e

    # ==========================================
    # ЦЕНЫ
    # ==========================================

    @staticmethod
    def _apply_catalog_price(
        item: SanitizedOrderItem,
        product: Product,
        variant: Optional[ProductVariant]
    ) -> SanitizedOrderItem:
        unit_price = product.price
        cost_price = product.cost_price

        if variant is not None:
            if variant.price_override is not None:
                unit_price = variant.price_override
            if variant.cost_price_override is not None:
                cost_price = variant.cost_price_override

        if unit_price != item.unit_price or cost_price != item.cost_price:
            logger.warning(
                "client_price_mismatch",
                product_id=item.product_id,
                variant_id=item.variant_id,
                client_unit_price=item.unit_price,
                catalog_unit_price=unit_price,
                client_cost_price=item.cost_price,
                catalog_cost_price=cost_price
            )

        return item.model_copy(update={"unit_price": unit_price, "cost_price": cost_price})
