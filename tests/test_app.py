# tests/test_app.py
"""Сборка приложения: настройки, rate limiter, старт и остановка."""

import pytest

from app.api.app import build_rate_limiter, create_app
from app.services.notifications import TelegramNotifier
from app.services.rate_limiter import InMemoryRateLimitStore, RateLimiter, RedisRateLimitStore
from config.settings import Settings
from infrastructure.redis_storage import check_redis_connection
from tests.fakes import FakeBot, FakeRedis


def test_database_url_is_required():
    with pytest.raises(ValueError):
        create_app(settings=Settings(_env_file=None, database_url=""))


def test_async_database_url():
    settings = Settings(_env_file=None, database_url="postgresql://u:p@db:5432/shop?sslmode=disable")

    assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5432/shop"


def test_telegram_enabled_needs_token_and_chat():
    assert not Settings(_env_file=None, telegram_bot_token="123:abc").telegram_enabled
    assert Settings(_env_file=None, telegram_bot_token="123:abc", telegram_chat_id="-100").telegram_enabled


def test_build_rate_limiter():
    memory = build_rate_limiter(Settings(_env_file=None, rate_limit_max_requests=3))
    redis = build_rate_limiter(Settings(_env_file=None, rate_limit_backend="redis"))

    assert isinstance(memory.store, InMemoryRateLimitStore)
    assert memory.max_requests == 3
    assert isinstance(redis.store, RedisRateLimitStore)


async def test_check_redis_connection():
    redis = FakeRedis()
    assert await check_redis_connection(redis)

    redis.alive = False
    assert not await check_redis_connection(redis)


async def test_lifespan_closes_bot_and_redis(settings, session_maker):
    bot = FakeBot()
    redis = FakeRedis()
    redis.alive = False
    app = create_app(
        settings=settings,
        session_maker=session_maker,
        rate_limiter=RateLimiter(RedisRateLimitStore(redis)),
        notifier=TelegramNotifier(bot, "-100")
    )

    # Недоступный Redis не мешает старту
    async with app.router.lifespan_context(app):
        pass

    assert bot.session.closed
    assert redis.closed
