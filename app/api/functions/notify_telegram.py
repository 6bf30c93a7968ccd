# app/api/functions/notify_telegram.py
"""
Ручная отправка уведомления о заказе в Telegram.

Используется админкой, когда нужно переслать заказ оператору ещё раз.
Заказ приходит целиком ({"order": {...}}) или только его id ({"order_id": "..."}),
тогда заказ и строки читаются из БД.

В отличие от фонового уведомления при создании заказа,
здесь вызывающий получает результат: message_id или ошибку.
"""

from typing import List, Tuple

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from app.api.dependencies import get_notifier, get_session
from app.api.responses import error_response, json_response, method_not_allowed, preflight_response
from app.errors import NotificationError, OrderNotFound
from app.schemas import NotifyOrderPayload
from app.services.notifications import TelegramNotifier
from app.services.validation import is_uuid
from infrastructure.database.models import Order, OrderItem
from infrastructure.database.repositories import OrderItemRepository, OrderRepository

logger = structlog.get_logger()
router = APIRouter()


@router.options("/notify-telegram")
async def notify_telegram_preflight():
    return preflight_response()


@router.api_route("/notify-telegram", methods=["GET", "PUT", "PATCH", "DELETE"])
async def notify_telegram_wrong_method():
    return method_not_allowed()


async def load_stored_order(session: AsyncSession, order_id: str) -> Tuple[Order, List[OrderItem]]:
    """Заказ и его строки из БД. Кидает OrderNotFound."""
    order = await OrderRepository(session).get_by_id(order_id.lower())
    if order is None:
        raise OrderNotFound()

    items = await OrderItemRepository(session).get_by_order(order.id)
    return order, items


@router.post("/notify-telegram")
async def notify_telegram(
    request: Request,
    session: AsyncSession = Depends(get_session),
    notifier: TelegramNotifier = Depends(get_notifier)
):
    """
    Тело запроса: {"order": {...заказ..., "items": [...]}} или {"order_id": "..."}

    Ответы:
        200 {"success": true, "message_id": 123}
        400 {"error": "Order data is required"}
        400 {"error": "Invalid order data"}
        404 {"error": "Order not found"}
        500 {"error": "Telegram credentials not configured"}
        500 {"error": "Failed to send Telegram message"}
    """

    if not notifier.enabled:
        raise NotificationError("Telegram credentials not configured")

    try:
        body = await request.json()
    except ValueError:
        body = None

    if not isinstance(body, dict) or not (body.get("order") or body.get("order_id")):
        return error_response("Order data is required", 400)

    # ==========================================
    # ВАРИАНТ 1: ЗАКАЗ ИЗ БД ПО ID
    # ==========================================

    if not body.get("order"):
        if not is_uuid(body["order_id"]):
            return error_response("Invalid order data", 400)

        order, items = await load_stored_order(session, body["order_id"])
        message_id = await notifier.send(order, items)

        logger.info("order_resent", order_id=order.id, order_number=order.order_number)
        return json_response({"success": True, "message_id": message_id})

    # ==========================================
    # ВАРИАНТ 2: ЗАКАЗ В ТЕЛЕ ЗАПРОСА
    # ==========================================

    try:
        payload = NotifyOrderPayload.model_validate(body)
    except ValidationError as e:
        logger.warning("notify_payload_invalid", errors=e.error_count())
        return error_response("Invalid order data", 400)

    order = payload.order
    message_id = await notifier.send(order, order.items)

    return json_response({"success": True, "message_id": message_id})
