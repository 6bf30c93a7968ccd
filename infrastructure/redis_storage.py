# infrastructure/redis_storage.py
"""
🔴 REDIS

Redis хранит счётчики rate limit, когда сервис запущен
в нескольких процессах/контейнерах и память процесса не общая.

При rate_limit_backend="memory" Redis не нужен вообще
и клиент не создаётся.
"""

from redis.asyncio import Redis

from infrastructure.logger import logger


def create_redis(redis_url: str) -> Redis:
    """
    Создаёт клиент Redis (соединение открывается лениво, при первой команде).

    Пример:
        redis = create_redis("redis://localhost:6379/0")
        await redis.incr("key")
    """
    return Redis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True
    )


# ==========================================
# ФУНКЦИЯ: проверить соединение
# ==========================================

async def check_redis_connection(redis: Redis) -> bool:
    """
    Проверяет что Redis живой и отвечает.
    Вызывается при старте приложения для диагностики.
    """

    try:
        await redis.ping()
        return True
    except Exception as e:
        logger.error("redis_connection_error", error=str(e))
        return False


__all__ = [
    "create_redis",
    "check_redis_connection",
]
