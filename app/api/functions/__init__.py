"""Серверные функции магазина: /create-order и /notify-telegram."""

from .create_order import router as create_order_router
from .notify_telegram import router as notify_telegram_router

__all__ = ["create_order_router", "notify_telegram_router"]
