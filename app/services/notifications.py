# app/services/notifications.py
"""
Сервис для отправки уведомлений о новых заказах в Telegram.

Два режима:
- notify() - "выстрелил и забыл": вызывается фоновой задачей после ответа клиенту,
  НИКОГДА не кидает исключений (заказ уже создан, уведомление не критично)
- send() - для /notify-telegram: кидает NotificationError, чтобы вызывающий
  узнал, что сообщение не ушло

Если токен бота или ID чата не заданы - уведомления просто выключены.
"""

import asyncio
from typing import Any, Optional, Sequence

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from app.errors import NotificationError
from app.utils.text import escape_html, format_price
from infrastructure.logger import logger

# ==========================================
# ТЕКСТ СООБЩЕНИЯ
# ==========================================

PAYMENT_TYPE_LABELS = {
    "cash": "💵 Naqd",
    "card": "💳 Karta",
    "transfer": "🏦 O'tkazma",
}


def _value(enum_or_str: Any) -> str:
    return getattr(enum_or_str, "value", enum_or_str)


def payment_type_label(payment_type: Any) -> str:
    value = _value(payment_type)
    return PAYMENT_TYPE_LABELS.get(value, value)


def delivery_type_label(delivery_type: Any) -> str:
    return "🚗 Yetkazib berish" if _value(delivery_type) == "delivery" else "🏪 Olib ketish"


def order_message_text(order: Any, items: Sequence[Any]) -> str:
    """
    Текст уведомления (HTML).

    order и items - что угодно с нужными атрибутами:
    ORM-модели Order/OrderItem или схемы NotifyOrder/NotifyOrderItem.
    Всё, что ввёл клиент, экранируется: иначе Telegram отклонит сообщение.
    """
    items_text = "\n".join(
        f"{index}. {escape_html(item.product_name_snapshot)} x {item.quantity} = {format_price(item.line_total)}"
        for index, item in enumerate(items, start=1)
    )

    address = f"📍 <b>Manzil:</b> {escape_html(order.delivery_address_text)}" if order.delivery_address_text else ""
    comment = f"💬 <b>Izoh:</b> {escape_html(order.comment)}" if order.comment else ""

    text = (
        f"🛒 <b>YANGI BUYURTMA!</b>\n\n"
        f"📦 <b>Buyurtma:</b> <code>{escape_html(order.order_number)}</code>\n\n"
        f"👤 <b>Mijoz:</b> {escape_html(order.customer_name)}\n"
        f"📞 <b>Telefon:</b> {escape_html(order.customer_phone)}\n\n"
        f"{delivery_type_label(order.delivery_type)}\n"
        f"{address}\n\n"
        f"{payment_type_label(order.payment_type)}\n\n"
        f"<b>Mahsulotlar:</b>\n"
        f"{items_text}\n\n"
        f"💰 <b>Jami:</b> {format_price(order.total_amount)}\n\n"
        f"{comment}"
    )
    return text.strip()


# ==========================================
# ОТПРАВКА
# ==========================================

class TelegramNotifier:
    """
    Пример:
        notifier = TelegramNotifier(Bot(token=...), chat_id="-100123", timeout=5)
        background_tasks.add_task(notifier.notify, order, items)
    """

    def __init__(self, bot: Optional[Bot], chat_id: Optional[str], timeout: float = 5.0):
        self.bot = bot
        self.chat_id = chat_id
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return self.bot is not None and bool(self.chat_id)

    async def send(self, order: Any, items: Sequence[Any]) -> Optional[int]:
        """Отправить уведомление. Возвращает message_id или кидает NotificationError."""
        if not self.enabled:
            logger.error("telegram_credentials_missing")
            raise NotificationError("Telegram credentials not configured")

        try:
            message = await asyncio.wait_for(
                self.bot.send_message(
                    chat_id=self.chat_id,
                    text=order_message_text(order, items),
                    parse_mode="HTML"
                ),
                timeout=self.timeout
            )
        except (asyncio.TimeoutError, TelegramAPIError) as e:
            logger.error(
                "telegram_send_failed",
                order_number=order.order_number,
                error=str(e) or "timeout",
                error_type=type(e).__name__
            )
            raise NotificationError() from e

        logger.info(
            "operator_notified",
            order_number=order.order_number,
            message_id=message.message_id
        )
        return message.message_id

    async def notify(self, order: Any, items: Sequence[Any]):
        """Фоновое уведомление: все ошибки только в лог."""
        if not self.enabled:
            logger.info("notification_disabled", order_number=order.order_number)
            return

        try:
            await self.send(order, items)
        except Exception as e:
            # Не кидаем исключение - заказ уже создан, это не критично
            logger.error(
                "notification_failed",
                order_number=order.order_number,
                error=str(e),
                error_type=type(e).__name__
            )

    async def close(self):
        if self.bot is not None:
            await self.bot.session.close()


def create_notifier(token: str, chat_id: Optional[str], timeout: float = 5.0) -> TelegramNotifier:
    """Бот создаётся только если есть токен (aiogram проверяет формат токена)."""
    bot = Bot(token=token) if token else None
    return TelegramNotifier(bot=bot, chat_id=chat_id, timeout=timeout)
