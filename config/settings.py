# config/settings.py
"""
Settings файл - здесь живут все настройки сервиса заказов.

Логика: когда приложение запускается, оно читает .env файл
и создает объект 'config' со всеми необходимыми значениями.

Если какое-то значение из .env будет неправильного типа,
Pydantic сразу выдаст ошибку и подскажет что не так.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional


class Settings(BaseSettings):
    """
    Основной класс настроек.

    Все поля можно переопределить переменными окружения
    (регистр не важен): DATABASE_URL, TELEGRAM_BOT_TOKEN и т.д.
    """

    service_name: str = "xozmag-orders"

    # ==========================================
    # TELEGRAM (уведомления о заказах)
    # ==========================================
    # Если токен или чат не заданы - уведомления просто выключены
    telegram_bot_token: str = ""
    telegram_chat_id: Optional[str] = None
    notification_timeout: float = 5.0

    # ==========================================
    # DATABASE
    # ==========================================
    database_url: str = ""

    # ==========================================
    # REDIS (нужен только для rate_limit_backend="redis")
    # ==========================================
    redis_url: str = "redis://localhost:6379/0"

    # ==========================================
    # API
    # ==========================================
    api_host: str = "0.0.0.0"
    api_port: int = 5000

    # ==========================================
    # RATE LIMIT
    # ==========================================
    rate_limit_backend: Literal["memory", "redis"] = "memory"
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 5

    # ==========================================
    # ЗАКАЗЫ
    # ==========================================
    # False = цены пересчитываются по каталогу, цены клиента игнорируются
    trust_client_prices: bool = False
    order_number_prefix: str = "XOZ"

    # ==========================================
    # ENVIRONMENT
    # ==========================================
    environment: Literal["development", "production"] = "development"
    debug: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def async_database_url(self) -> str:
        """Convert standard PostgreSQL URL to asyncpg format"""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if "sslmode=disable" in url:
            url = url.replace("?sslmode=disable", "")
        return url

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)


config = Settings()
