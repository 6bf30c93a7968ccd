# infrastructure/database/base.py
"""
🗄️ ПОДКЛЮЧЕНИЕ К БД

Движок (engine) и фабрика сессий создаются один раз при старте приложения.
Сессии должны жить с expire_on_commit=False: после commit мы ещё отдаём
заказ в ответ API и в уведомление, без повторного запроса в БД.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from infrastructure.database.models import Base
from infrastructure.logger import logger


def create_engine(database_url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Создать async-движок (postgresql+asyncpg://... или sqlite+aiosqlite://...)."""
    return create_async_engine(database_url, echo=echo, **kwargs)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def init_db(engine: AsyncEngine):
    """Создаём таблицы если их нет."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_initialized")


async def close_db(engine: AsyncEngine):
    """Закрываем пул соединений."""
    await engine.dispose()
    logger.info("database_closed")


@asynccontextmanager
async def get_db_session(session_maker: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """
    Выдаёт сессию и гарантированно её закрывает.

    Пример:
        async with get_db_session(session_maker) as session:
            ...
    """
    async with session_maker() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("database_error", error=str(e))
            raise
