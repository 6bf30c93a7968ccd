# app/errors.py
"""
Ошибки сервиса заказов.

Каждая ошибка знает свой HTTP статус и текст для клиента.
Текст для клиента НЕ содержит внутренних деталей (SQL, стектрейсы) -
детали пишутся только в лог.

Ошибки валидации полей - это не исключения, а данные (FieldError в app/schemas.py):
их собирают списком и отдают клиенту все сразу.
"""


class OrderServiceError(Exception):
    """Базовая ошибка. Превращается в ответ {"error": message}."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class RateLimited(OrderServiceError):
    """Слишком много заказов с одного IP."""

    status_code = 429
    message = "Too many requests. Please try again later."


class CatalogIntegrityError(OrderServiceError):
    """Товар/вариант не найден, выключен или вариант от другого товара."""

    status_code = 400


class CatalogLookupError(OrderServiceError):
    """Не удалось прочитать каталог из БД."""

    status_code = 500
    message = "Failed to validate products"


class PersistenceError(OrderServiceError):
    """Не удалось записать заказ или его строки."""

    status_code = 500
    message = "Failed to create order"


class NotificationError(OrderServiceError):
    """
    Не удалось отправить уведомление в Telegram.

    При создании заказа эта ошибка всегда глушится (только лог).
    """

    status_code = 500
    message = "Failed to send Telegram message"


class OrderNotFound(OrderServiceError):
    """Заказ для повторной отправки не найден."""

    status_code = 404
    message = "Order not found"
