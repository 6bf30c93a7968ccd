# main.py
"""
🚀 ГЛАВНЫЙ ФАЙЛ ЗАПУСКА СЕРВИСА ЗАКАЗОВ

Это точка входа - отсюда всё начинается!

Команда для запуска:
    python main.py
или через uvicorn напрямую:
    uvicorn main:app --host 0.0.0.0 --port 5000
"""

import asyncio

import structlog
import uvicorn

from app.api.app import create_app
from config.settings import config
from infrastructure.logger import setup_logging

logger = structlog.get_logger()


# ==========================================
# 🌐 СОЗДАЁМ FASTAPI ПРИЛОЖЕНИЕ
# ==========================================

setup_logging(config.log_level)

# Проверяем критические переменные окружения
if not config.database_url:
    logger.error("database_url_missing", message="DATABASE_URL не установлен в .env")
    raise ValueError("DATABASE_URL не найден в переменных окружения")

if not config.telegram_enabled:
    logger.warning(
        "telegram_not_configured",
        message="TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID не заданы, уведомления выключены"
    )

app = create_app(config)


# ==========================================
# 🚀 ГЛАВНАЯ ФУНКЦИЯ ЗАПУСКА
# ==========================================

async def main():
    """Запуск FastAPI (слушаем заказы из магазина)."""

    config_uvicorn = uvicorn.Config(
        app,
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.lower(),
        access_log=False,  # запросы логирует LoggingMiddleware
    )
    server = uvicorn.Server(config_uvicorn)

    logger.info(
        "fastapi_starting",
        host=config.api_host,
        port=config.api_port,
        environment=config.environment
    )

    try:
        await server.serve()
    except Exception as e:
        logger.error("fastapi_error", error=str(e), error_type=type(e).__name__)
        raise


# ==========================================
# 📌 ENTRY POINT (точка входа)
# ==========================================

if __name__ == "__main__":
    try:
        asyncio.run(main())

    except KeyboardInterrupt:
        logger.info("app_interrupted", message="⛔ Сервис остановлен (Ctrl+C)")

    finally:
        logger.info("app_final_shutdown", message="👋 Сервис полностью выключен")
