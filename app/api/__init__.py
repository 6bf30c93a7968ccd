# app/api/__init__.py
"""
🌐 API ROUTES (маршруты FastAPI)

Магазин отправляет заказы сюда:
- POST /create-order      - создать заказ
- POST /notify-telegram   - переслать заказ оператору
- GET  /health            - проверка что сервис живой
"""

from fastapi import APIRouter, Request

health_router = APIRouter(tags=["health"])


# ==========================================
# HEALTH CHECK (проверка что API живой)
# ==========================================

@health_router.get("/health")
async def health_check(request: Request):
    """
    Используется для мониторинга (Docker, Kubernetes и т.д.).

    Пример:
        GET /health
        → {"status": "ok", "service": "xozmag-orders"}
    """
    return {
        "status": "ok",
        "service": request.app.state.settings.service_name
    }


__all__ = ["health_router"]
