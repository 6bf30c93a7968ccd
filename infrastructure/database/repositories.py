# infrastructure/database/repositories.py
"""
Repository паттерн.

Вместо того чтобы писать:
    session.execute(select(...))
    session.commit()
везде в коде, мы создаем методы:
    repo.get_many([...])
    repo.create(...)

Каталог (товары, варианты) только читаем, причём пачкой:
один запрос на все товары заказа, а не N запросов.
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from .models import Order, OrderItem, OrderStatus, Product, ProductVariant

logger = structlog.get_logger()


# ==========================================
# REPOSITORY: Product (каталог)
# ==========================================

class ProductRepository:
    """Чтение товаров каталога."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_many(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        """
        Получить товары по списку ID одним запросом.

        Пример:
            products = await repo.get_many(["0b4c...", "9f1e..."])
            product = products.get("0b4c...")  # None если не найден
        """
        ids = set(product_ids)
        if not ids:
            return {}

        stmt = select(Product).where(Product.id.in_(ids))
        result = await self.session.execute(stmt)

        return {product.id: product for product in result.scalars().all()}


# ==========================================
# REPOSITORY: ProductVariant (варианты товаров)
# ==========================================

class VariantRepository:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_many(self, variant_ids: Iterable[str]) -> Dict[str, ProductVariant]:
        """Получить варианты по списку ID одним запросом."""
        ids = set(variant_ids)
        if not ids:
            return {}

        stmt = select(ProductVariant).where(ProductVariant.id.in_(ids))
        result = await self.session.execute(stmt)

        return {variant.id: variant for variant in result.scalars().all()}


# ==========================================
# REPOSITORY: Order (заказы)
# ==========================================

class OrderRepository:
    """
    Репозиторий для работы с заказами.

    Каждый метод записи делает свой commit: заказ и его строки
    сохраняются ДВУМЯ отдельными транзакциями (см. OrderPersister).
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        order_number: str,
        customer_name: str,
        customer_phone: str,
        delivery_type: str,
        payment_type: str,
        total_amount: int,
        delivery_lat: Optional[float] = None,
        delivery_lng: Optional[float] = None,
        delivery_address_text: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> Order:
        """
        Создать заказ со статусом NEW.

        Пример:
            order = await repo.create(
                order_number="XOZ-20240121-0042",
                customer_name="Ali Valiyev",
                customer_phone="+998901234567",
                delivery_type="pickup",
                payment_type="cash",
                total_amount=30000,
            )
        """
        order = Order(
            order_number=order_number,
            customer_name=customer_name,
            customer_phone=customer_phone,
            delivery_type=delivery_type,
            delivery_lat=delivery_lat,
            delivery_lng=delivery_lng,
            delivery_address_text=delivery_address_text,
            payment_type=payment_type,
            comment=comment,
            total_amount=total_amount,
            status=OrderStatus.NEW
        )
        self.session.add(order)

        await self.session.commit()

        logger.info("order_row_created", order_id=order.id, order_number=order_number)

        return order

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        stmt = select(Order).where(Order.id == order_id)
        result = await self.session.execute(stmt)

        return result.scalars().first()

    async def delete(self, order_id: str):
        """Удалить заказ (компенсирующее действие, если строки не записались)."""
        stmt = delete(Order).where(Order.id == order_id)

        await self.session.execute(stmt)

        await self.session.commit()

        logger.info("order_row_deleted", order_id=order_id)


# ==========================================
# REPOSITORY: OrderItem (строки заказа)
# ==========================================

class OrderItemRepository:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_many(self, order_id: str, items: list) -> List[OrderItem]:
        """
        Записать все строки заказа одной транзакцией.

        items - очищенные позиции (SanitizedOrderItem):
        product_id, variant_id, quantity, unit_price, cost_price, product_name.
        """
        rows = [
            OrderItem(
                order_id=order_id,
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.unit_price * item.quantity,
                cost_price_snapshot=item.cost_price,
                product_name_snapshot=item.product_name
            )
            for item in items
        ]
        self.session.add_all(rows)

        await self.session.commit()

        return rows

    async def get_by_order(self, order_id: str) -> List[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.created_at.asc())
        )
        result = await self.session.execute(stmt)

        return list(result.scalars().all())
