# infrastructure/__init__.py
"""Инфраструктура приложения."""

from .logger import logger, setup_logging
from .redis_storage import create_redis, check_redis_connection
from .database import create_engine, create_session_maker, get_db_session, init_db, close_db

__all__ = [
    "logger",
    "setup_logging",
    "create_redis",
    "check_redis_connection",
    "create_engine",
    "create_session_maker",
    "get_db_session",
    "init_db",
    "close_db",
]
