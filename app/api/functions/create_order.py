# app/api/functions/create_order.py
"""
Приём заказа из магазина.

Когда покупатель нажимает "Оформить заказ", браузер отправляет POST /create-order.

Логика:
1. Rate limit по IP (максимум 5 заказов в минуту)
2. Валидация и очистка данных (все ошибки полей сразу)
3. Проверка товаров/вариантов по каталогу + цены из каталога
4. Запись заказа и его строк (с откатом заказа, если строки не записались)
5. Уведомление в Telegram (в фоне, уже после ответа)
6. Ответ 201 с номером заказа
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from app.api.dependencies import get_notifier, get_rate_limiter, get_session, get_settings
from app.api.responses import json_response, method_not_allowed, preflight_response
from app.errors import OrderServiceError, RateLimited
from app.services.catalog import CatalogChecker
from app.services.notifications import TelegramNotifier
from app.services.orders import OrderPersister
from app.services.rate_limiter import RateLimiter, client_identity
from app.services.validation import validate_order_input
from config.settings import Settings

logger = structlog.get_logger()
router = APIRouter()


# ==========================================
# CORS PREFLIGHT + ЧУЖИЕ МЕТОДЫ
# ==========================================

@router.options("/create-order")
async def create_order_preflight():
    return preflight_response()


@router.api_route("/create-order", methods=["GET", "PUT", "PATCH", "DELETE"])
async def create_order_wrong_method():
    return method_not_allowed()


# ==========================================
# ENDPOINT: POST /create-order
# ==========================================

@router.post("/create-order", status_code=201)
async def create_order(
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    notifier: TelegramNotifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings)
):
    try:
        # ==========================================
        # ШАГ 1: RATE LIMIT
        # ==========================================

        client_ip = client_identity(request)
        if not await rate_limiter.admit(client_ip):
            raise RateLimited()

        # ==========================================
        # ШАГ 2: ВАЛИДАЦИЯ
        # ==========================================

        try:
            payload = await request.json()
        except ValueError:
            payload = None

        validation = validate_order_input(payload)

        if not validation.valid:
            logger.warning(
                "order_validation_failed",
                client=client_ip,
                fields=[error.field for error in validation.errors]
            )
            return json_response(
                {
                    "error": "Validation failed",
                    "details": [error.model_dump() for error in validation.errors]
                },
                status_code=400
            )

        order_input = validation.data

        # ==========================================
        # ШАГ 3: КАТАЛОГ
        # ==========================================

        checker = CatalogChecker(session, trust_client_prices=settings.trust_client_prices)
        items = await checker.check(order_input.items)

        # ==========================================
        # ШАГ 4: ЗАПИСЬ В БД
        # ==========================================

        persister = OrderPersister(session, prefix=settings.order_number_prefix)
        order, order_items = await persister.persist(order_input, items)

        # ==========================================
        # ШАГ 5: УВЕДОМЛЕНИЕ (В ФОНЕ)
        # ==========================================

        # Выполнится после отправки ответа, клиент его не ждёт
        background_tasks.add_task(notifier.notify, order, order_items)

    # ==========================================
    # ОБРАБОТКА ОШИБОК
    # ==========================================
    except OrderServiceError as e:
        # Ожидаемые ошибки (429, 400, 500) - их рисует обработчик в app.py
        if e.status_code == 400:
            logger.warning("order_rejected", reason=e.message)
        raise

    except Exception as e:
        logger.error(
            "create_order_error",
            error=str(e),
            error_type=type(e).__name__
        )
        raise OrderServiceError() from e

    return json_response(
        {
            "success": True,
            "order": {
                "id": order.id,
                "order_number": order.order_number,
                "total_amount": order.total_amount,
                "status": order.status.value,
            }
        },
        status_code=201
    )
