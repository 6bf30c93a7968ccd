# app/api/dependencies.py
"""
Зависимости FastAPI (Depends).

Все компоненты живут в app.state (их кладёт create_app),
поэтому в тестах их легко подменить.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.notifications import TelegramNotifier
from app.services.rate_limiter import RateLimiter
from config.settings import Settings
from infrastructure.database.base import get_db_session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_notifier(request: Request) -> TelegramNotifier:
    return request.app.state.notifier


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Новая сессия БД на каждый запрос."""
    async with get_db_session(request.app.state.session_maker) as session:
        yield session
