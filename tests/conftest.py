# tests/conftest.py
"""
Общие фикстуры.

- БД: SQLite в памяти (aiosqlite), одна на тест, с тестовым каталогом
- Telegram: FakeBot вместо настоящего aiogram.Bot (запоминает сообщения)
- Время для rate limiter: FakeClock, который двигаем руками
- HTTP: httpx.AsyncClient поверх ASGI, без сети и без uvicorn
"""

import uuid
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from app.api.app import create_app
from app.services.notifications import TelegramNotifier
from app.services.rate_limiter import InMemoryRateLimitStore, RateLimiter
from config.settings import Settings
from infrastructure.database.base import create_engine, create_session_maker, init_db
from infrastructure.database.models import Product, ProductVariant
from tests.fakes import FakeBot, FakeClock

CHAT_ID = "-1001234567890"


# ==========================================
# БД
# ==========================================

@pytest_asyncio.fixture
async def engine():
    engine = create_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def catalog(session_maker):
    """
    Тестовый каталог:
    - spoon: активный товар 15000 / 10000
    - pot: активный товар 80000 / 60000
    - broken_kettle: выключенный товар
    - spoon_set: активный вариант spoon с ценой 40000 / 28000
    - spoon_gold: выключенный вариант spoon
    - pot_small: активный вариант pot без своих цен
    """
    ids = SimpleNamespace(
        spoon=str(uuid.uuid4()),
        pot=str(uuid.uuid4()),
        broken_kettle=str(uuid.uuid4()),
        spoon_set=str(uuid.uuid4()),
        spoon_gold=str(uuid.uuid4()),
        pot_small=str(uuid.uuid4()),
    )

    async with session_maker() as session:
        session.add_all([
            Product(id=ids.spoon, name="Metall qoshiq", price=15000, cost_price=10000, is_active=True),
            Product(id=ids.pot, name="Qozon", price=80000, cost_price=60000, is_active=True),
            Product(id=ids.broken_kettle, name="Choynak", price=50000, cost_price=30000, is_active=False),
        ])
        await session.flush()
        session.add_all([
            ProductVariant(
                id=ids.spoon_set,
                product_id=ids.spoon,
                name="6 dona",
                price_override=40000,
                cost_price_override=28000,
                is_active=True
            ),
            ProductVariant(id=ids.spoon_gold, product_id=ids.spoon, name="Oltin", is_active=False),
            ProductVariant(id=ids.pot_small, product_id=ids.pot, name="5 litr", is_active=True),
        ])
        await session.commit()

    return ids


# ==========================================
# ПРИЛОЖЕНИЕ
# ==========================================

@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        telegram_bot_token="",
        telegram_chat_id=CHAT_ID,
        trust_client_prices=False,
        order_number_prefix="XOZ",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(clock, settings):
    return RateLimiter(
        InMemoryRateLimitStore(clock=clock),
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds
    )


@pytest.fixture
def fake_bot():
    return FakeBot()


@pytest.fixture
def notifier(fake_bot):
    return TelegramNotifier(bot=fake_bot, chat_id=CHAT_ID, timeout=1.0)


@pytest.fixture
def app(settings, session_maker, rate_limiter, notifier):
    return create_app(
        settings=settings,
        session_maker=session_maker,
        rate_limiter=rate_limiter,
        notifier=notifier
    )


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

