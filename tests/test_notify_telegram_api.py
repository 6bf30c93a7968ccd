# tests/test_notify_telegram_api.py
"""POST /notify-telegram: ручная пересылка заказа оператору."""

from aiogram.exceptions import TelegramBadRequest
from httpx import ASGITransport, AsyncClient

from app.api.app import create_app
from app.services.notifications import TelegramNotifier
from app.services.orders import OrderPersister
from app.services.validation import validate_order_input
from tests.fakes import make_order_payload

ORDER = {
    "id": "0b4c1a3e-6a1f-4c2b-9d3e-2f1a0b9c8d7e",
    "order_number": "XOZ-20240121-0042",
    "customer_name": "Ali Valiyev",
    "customer_phone": "+998901234567",
    "delivery_type": "delivery",
    "delivery_address_text": "Toshkent, Chilonzor 5",
    "payment_type": "transfer",
    "total_amount": 30000,
    "items": [
        {"product_name_snapshot": "Metall qoshiq", "quantity": 2, "unit_price": 15000, "line_total": 30000},
    ],
}


async def test_notify(client, fake_bot):
    response = await client.post("/notify-telegram", json={"order": ORDER})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message_id": 1}
    assert "XOZ-20240121-0042" in fake_bot.sent[0]["text"]
    assert "🏦 O'tkazma" in fake_bot.sent[0]["text"]


async def test_order_is_required(client, fake_bot):
    for body in ({}, {"order": None}, [1, 2]):
        response = await client.post("/notify-telegram", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Order data is required"}

    assert fake_bot.sent == []


# ==========================================
# ПОВТОРНАЯ ОТПРАВКА ПО ID
# ==========================================

async def stored_order(session_maker, product_id, **overrides):
    order_input = validate_order_input(make_order_payload(product_id, **overrides)).data
    async with session_maker() as session:
        order, _ = await OrderPersister(session).persist(order_input, order_input.items)
    return order


async def test_resend_stored_order(client, catalog, session_maker, fake_bot):
    order = await stored_order(session_maker, catalog.spoon, comment="qoshiq_6 *tez*")

    response = await client.post("/notify-telegram", json={"order_id": order.id.upper()})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message_id": 1}
    text = fake_bot.sent[0]["text"]
    assert order.order_number in text
    assert "1. Metall qoshiq x 2 = 30 000 so'm" in text
    assert "qoshiq_6 *tez*" in text


async def test_resend_unknown_order(client, fake_bot):
    response = await client.post("/notify-telegram", json={"order_id": "0b4c1a3e-6a1f-4c2b-9d3e-2f1a0b9c8d7e"})

    assert response.status_code == 404
    assert response.json() == {"error": "Order not found"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert fake_bot.sent == []


async def test_resend_with_invalid_id(client):
    for order_id in ("42", 42, "0b4c1a3e-6a1f-4c2b-9d3e-2f1a0b9c8d7e\n"):
        response = await client.post("/notify-telegram", json={"order_id": order_id})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid order data"}


async def test_malformed_order(client):
    response = await client.post("/notify-telegram", json={"order": {"order_number": "X"}})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid order data"}


async def test_telegram_error(client, fake_bot):
    fake_bot.error = TelegramBadRequest(method=None, message="chat not found")

    response = await client.post("/notify-telegram", json={"order": ORDER})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to send Telegram message"}


async def test_credentials_not_configured(settings, session_maker, rate_limiter):
    app = create_app(
        settings=settings,
        session_maker=session_maker,
        rate_limiter=rate_limiter,
        notifier=TelegramNotifier(bot=None, chat_id=None)
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/notify-telegram", json={"order": ORDER})

    assert response.status_code == 500
    assert response.json() == {"error": "Telegram credentials not configured"}
    assert response.headers["access-control-allow-origin"] == "*"


async def test_preflight_and_wrong_method(client):
    preflight = await client.options("/notify-telegram")
    assert preflight.status_code == 200

    for method in ("GET", "HEAD", "TRACE"):
        wrong = await client.request(method, "/notify-telegram")

        assert wrong.status_code == 405
        assert wrong.headers["access-control-allow-origin"] == "*"
