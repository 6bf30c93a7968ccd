# app/services/orders.py
"""
Сервис заказов: запись заказа и его строк в БД.

Заказ и строки пишутся ДВУМЯ коммитами:
1. orders       → commit
2. order_items  → commit

Если шаг 2 упал - удаляем заказ из шага 1 (компенсирующее действие),
чтобы в БД не осталось заказа без товаров.
"""

import random
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import PersistenceError
from app.schemas import SanitizedOrder, SanitizedOrderItem
from infrastructure.database.models import Order, OrderItem
from infrastructure.database.repositories import OrderItemRepository, OrderRepository
from infrastructure.logger import logger


def generate_order_number(prefix: str = "XOZ", now: Optional[datetime] = None) -> str:
    """
    PREFIX-YYYYMMDD-NNNN, NNNN - случайное число 0000..9999.

    Совпадения возможны (никто их не проверяет), номер только для людей,
    настоящий идентификатор заказа - orders.id.
    """
    now = now or datetime.now(timezone.utc)
    return f"{prefix}-{now:%Y%m%d}-{random.randint(0, 9999):04d}"


def calculate_total(items: List[SanitizedOrderItem]) -> int:
    return sum(item.unit_price * item.quantity for item in items)


class OrderPersister:
    """
    Пример:
        persister = OrderPersister(session, prefix="XOZ")
        order, items = await persister.persist(sanitized_order, checked_items)
    """

    def __init__(self, session: AsyncSession, prefix: str = "XOZ"):
        self.session = session
        self.prefix = prefix
        self.orders = OrderRepository(session)
        self.items = OrderItemRepository(session)

    async def persist(
        self,
        order_input: SanitizedOrder,
        items: List[SanitizedOrderItem]
    ) -> Tuple[Order, List[OrderItem]]:

        order_number = generate_order_number(self.prefix)
        total_amount = calculate_total(items)

        # ==========================================
        # ШАГ 1: ЗАКАЗ
        # ==========================================

        try:
            order = await self.orders.create(
                order_number=order_number,
                customer_name=order_input.customer_name,
                customer_phone=order_input.customer_phone,
                delivery_type=order_input.delivery_type,
                delivery_lat=order_input.delivery_lat,
                delivery_lng=order_input.delivery_lng,
                delivery_address_text=order_input.delivery_address_text,
                payment_type=order_input.payment_type,
                comment=order_input.comment,
                total_amount=total_amount
            )
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "order_creation_failed",
                order_number=order_number,
                error=str(e),
                error_type=type(e).__name__
            )
            raise PersistenceError("Failed to create order") from e

        # ==========================================
        # ШАГ 2: СТРОКИ ЗАКАЗА
        # ==========================================

        # rollback сбрасывает состояние объектов сессии, id берём заранее
        order_id = order.id

        try:
            order_items = await self.items.create_many(order_id, items)
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "order_items_creation_failed",
                order_id=order_id,
                order_number=order_number,
                error=str(e),
                error_type=type(e).__name__
            )
            await self._discard_order(order_id)
            raise PersistenceError("Failed to create order items") from e

        logger.info(
            "order_created",
            order_id=order_id,
            order_number=order_number,
            items_count=len(order_items),
            total_amount=total_amount
        )

        return order, order_items

    async def _discard_order(self, order_id: str):
        """Компенсация: удалить заказ без строк. Ошибку только логируем."""
        try:
            await self.orders.delete(order_id)
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "order_cleanup_failed",
                order_id=order_id,
                error=str(e),
                error_type=type(e).__name__
            )
