# app/services/rate_limiter.py
"""
Защита от спама заказами (rate limit).

Ограничивает количество заказов с одного IP за окно времени.
По умолчанию: максимум 5 заказов за 60 секунд.

Окно фиксированное: начинается с первого запроса и сбрасывается
при первом запросе ПОСЛЕ истечения (без фоновых таймеров).

Где хранить счётчики - решает store:
- InMemoryRateLimitStore: словарь в памяти процесса (+ asyncio.Lock).
  Память не чистится, по записи на каждый IP - для одного инстанса это ок.
- RedisRateLimitStore: общий Redis для нескольких процессов.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from redis.asyncio import Redis
from starlette.requests import Request

from infrastructure.logger import logger

UNKNOWN_CLIENT = "unknown"


class RateLimitStore(Protocol):
    async def hit(self, key: str, limit: int, window: float) -> bool:
        """Засчитать запрос. True = пропустить, False = лимит исчерпан."""
        ...


# ==========================================
# ХРАНИЛИЩЕ В ПАМЯТИ
# ==========================================

@dataclass
class _Window:
    count: int
    started_at: float


class InMemoryRateLimitStore:

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str, limit: int, window: float) -> bool:
        async with self._lock:
            now = self.clock()
            entry = self._windows.get(key)

            # Первый запрос или окно истекло - начинаем новое
            if entry is None or now - entry.started_at > window:
                self._windows[key] = _Window(count=1, started_at=now)
                return True

            if entry.count >= limit:
                return False

            entry.count += 1
            return True

    def __len__(self):
        return len(self._windows)


# ==========================================
# ХРАНИЛИЩЕ В REDIS
# ==========================================

class RedisRateLimitStore:
    """
    SET NX EX + INCR в одной транзакции (MULTI/EXEC).
    Ключ создаётся сразу с TTL, поэтому окно не может остаться без срока жизни.
    """

    def __init__(self, redis: Redis, prefix: str = "rate_limit:create_order"):
        self.redis = redis
        self.prefix = prefix

    async def hit(self, key: str, limit: int, window: float) -> bool:
        redis_key = f"{self.prefix}:{key}"

        async with self.redis.pipeline(transaction=True) as pipe:
            _, count = await (
                pipe.set(redis_key, 0, ex=int(window), nx=True)
                .incr(redis_key)
                .execute()
            )

        return count <= limit


# ==========================================
# RATE LIMITER
# ==========================================

class RateLimiter:
    """
    Пример:
        limiter = RateLimiter(InMemoryRateLimitStore(), max_requests=5, window_seconds=60)
        if not await limiter.admit("1.2.3.4"):
            raise RateLimited()
    """

    def __init__(
        self,
        store: RateLimitStore,
        max_requests: int = 5,
        window_seconds: float = 60
    ):
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def admit(self, client_identity: str) -> bool:
        allowed = await self.store.hit(
            client_identity or UNKNOWN_CLIENT,
            self.max_requests,
            self.window_seconds
        )

        if not allowed:
            logger.warning("rate_limit_exceeded", client=client_identity)

        return allowed


def client_identity(request: Request) -> str:
    """
    IP клиента: первый адрес из X-Forwarded-For, потом CF-Connecting-IP,
    иначе "unknown" (все такие запросы делят один лимит).
    """
    forwarded: Optional[str] = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    return request.headers.get("cf-connecting-ip") or UNKNOWN_CLIENT
