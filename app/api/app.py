# app/api/app.py
"""
FastAPI приложение сервиса заказов.

create_app() собирает всё вместе:
- настройки
- БД (engine + фабрика сессий)
- rate limiter (память или Redis)
- Telegram уведомления
- маршруты /create-order, /notify-telegram, /health

Любой компонент можно передать готовым (так делают тесты).
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.api import health_router
from app.api.functions import create_order_router, notify_telegram_router
from app.api.middlewares import LoggingMiddleware
from app.api.responses import error_response, method_not_allowed
from app.errors import OrderServiceError
from app.services.notifications import TelegramNotifier, create_notifier
from app.services.rate_limiter import (
    InMemoryRateLimitStore,
    RateLimiter,
    RedisRateLimitStore,
)
from config.settings import Settings, config
from infrastructure.database.base import close_db, create_engine, create_session_maker, init_db
from infrastructure.logger import logger
from infrastructure.redis_storage import check_redis_connection, create_redis


def build_rate_limiter(settings: Settings) -> RateLimiter:
    if settings.rate_limit_backend == "redis":
        store = RedisRateLimitStore(create_redis(settings.redis_url))
    else:
        store = InMemoryRateLimitStore()

    return RateLimiter(
        store,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds
    )


def create_app(
    settings: Optional[Settings] = None,
    session_maker: Optional[async_sessionmaker] = None,
    rate_limiter: Optional[RateLimiter] = None,
    notifier: Optional[TelegramNotifier] = None,
) -> FastAPI:
    settings = settings or config

    # Если фабрику сессий не передали - создаём свой движок и сами его закроем
    engine = None
    if session_maker is None:
        if not settings.database_url:
            raise ValueError("DATABASE_URL не найден в переменных окружения")
        engine = create_engine(settings.async_database_url)
        session_maker = create_session_maker(engine)

    if notifier is None:
        notifier = create_notifier(
            settings.telegram_bot_token,
            settings.telegram_chat_id,
            timeout=settings.notification_timeout
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("app_startup", service=settings.service_name)

        if engine is not None:
            await init_db(engine)

        store = app.state.rate_limiter.store
        if isinstance(store, RedisRateLimitStore) and not await check_redis_connection(store.redis):
            logger.warning("rate_limit_redis_unavailable", redis_url=settings.redis_url)

        if not notifier.enabled:
            logger.warning("telegram_not_configured")

        try:
            yield
        finally:
            logger.info("app_shutdown")
            try:
                await notifier.close()
                store = app.state.rate_limiter.store
                if isinstance(store, RedisRateLimitStore):
                    await store.redis.aclose()
                if engine is not None:
                    await close_db(engine)
            except Exception as e:
                logger.error("shutdown_error", error=str(e))

    app = FastAPI(
        title="Xozmag Orders API",
        description="Приём заказов магазина: валидация, каталог, запись, уведомления",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.session_maker = session_maker
    app.state.rate_limiter = rate_limiter or build_rate_limiter(settings)
    app.state.notifier = notifier

    app.add_middleware(LoggingMiddleware)

    # ==========================================
    # ОШИБКИ → {"error": "..."}
    # ==========================================

    @app.exception_handler(OrderServiceError)
    async def order_service_error_handler(request: Request, exc: OrderServiceError):
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # HEAD, TRACE и прочие методы без своего маршрута
        if exc.status_code == 405:
            return method_not_allowed()
        return await http_exception_handler(request, exc)

    # ==========================================
    # МАРШРУТЫ
    # ==========================================

    app.include_router(create_order_router)
    app.include_router(notify_telegram_router)
    app.include_router(health_router)

    return app
