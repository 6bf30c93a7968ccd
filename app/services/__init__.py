"""Бизнес-логика приёма заказов."""

from .catalog import CatalogChecker
from .notifications import TelegramNotifier, create_notifier
from .orders import OrderPersister
from .rate_limiter import InMemoryRateLimitStore, RateLimiter, RedisRateLimitStore
from .validation import validate_order_input

__all__ = [
    "CatalogChecker",
    "TelegramNotifier",
    "create_notifier",
    "OrderPersister",
    "InMemoryRateLimitStore",
    "RateLimiter",
    "RedisRateLimitStore",
    "validate_order_input",
]
