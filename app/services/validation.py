# app/services/validation.py
"""
Валидация заказа из магазина.

На вход приходит что угодно (JSON от браузера, которому нельзя верить).
На выход:
- ValidationResult(valid=True, data=SanitizedOrder) - всё хорошо
- ValidationResult(valid=False, errors=[FieldError, ...]) - ВСЕ ошибки сразу,
  а не только первая

Функция никогда не кидает исключений из-за плохих данных.
"""

import math
import re
from typing import Any, Dict, List, Optional

from app.schemas import FieldError, SanitizedOrder, SanitizedOrderItem, ValidationResult
from app.utils.phone import format_phone
from app.utils.text import sanitize_text
from infrastructure.database.models import DeliveryType, PaymentType

# ==========================================
# ЛИМИТЫ
# ==========================================

NAME_MIN, NAME_MAX = 2, 100
ADDRESS_MIN, ADDRESS_MAX = 5, 500
COMMENT_MAX = 1000
PRODUCT_NAME_MAX = 255
MAX_ITEMS = 50
QUANTITY_MIN, QUANTITY_MAX = 1, 1000
PRICE_MIN, PRICE_MAX = 0, 100_000_000

UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE | re.ASCII
)

DELIVERY_TYPES = {t.value for t in DeliveryType}
PAYMENT_TYPES = {t.value for t in PaymentType}


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_RE.fullmatch(value))


def _is_number(value: Any) -> bool:
    # bool - подкласс int, но true/false из JSON числом не считаем
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _in_range(value: Any, low: float, high: float) -> bool:
    return _is_number(value) and low <= value <= high


def _present(data: Dict[str, Any], key: str) -> bool:
    return data.get(key) is not None


# ==========================================
# ПРОВЕРКА ОДНОЙ ПОЗИЦИИ
# ==========================================

def _validate_item(item: Any, index: int) -> List[FieldError]:
    prefix = f"items[{index}]"

    if not isinstance(item, dict):
        return [FieldError(field=prefix, message="Invalid item")]

    errors = []

    if not is_uuid(item.get("product_id")):
        errors.append(FieldError(field=f"{prefix}.product_id", message="Invalid product ID"))

    if _present(item, "variant_id") and not is_uuid(item["variant_id"]):
        errors.append(FieldError(field=f"{prefix}.variant_id", message="Invalid variant ID"))

    if not _in_range(item.get("quantity"), QUANTITY_MIN, QUANTITY_MAX):
        errors.append(FieldError(
            field=f"{prefix}.quantity",
            message=f"Invalid quantity (must be {QUANTITY_MIN}-{QUANTITY_MAX})"
        ))

    if not _in_range(item.get("unit_price"), PRICE_MIN, PRICE_MAX):
        errors.append(FieldError(field=f"{prefix}.unit_price", message="Invalid unit price"))

    if not _in_range(item.get("cost_price"), PRICE_MIN, PRICE_MAX):
        errors.append(FieldError(field=f"{prefix}.cost_price", message="Invalid cost price"))

    name = item.get("product_name")
    if not isinstance(name, str) or not name.strip():
        errors.append(FieldError(field=f"{prefix}.product_name", message="Product name is required"))
    elif len(name.strip()) > PRODUCT_NAME_MAX:
        errors.append(FieldError(
            field=f"{prefix}.product_name",
            message=f"Product name is too long (max {PRODUCT_NAME_MAX} characters)"
        ))

    return errors


# ==========================================
# ПРОВЕРКА ВСЕГО ЗАКАЗА
# ==========================================

def _collect_errors(data: Dict[str, Any]) -> List[FieldError]:
    errors = []

    # Имя
    name = data.get("customer_name")
    if not isinstance(name, str) or len(name.strip()) < NAME_MIN:
        errors.append(FieldError(
            field="customer_name",
            message=f"Customer name is required (min {NAME_MIN} characters)"
        ))
    elif len(name.strip()) > NAME_MAX:
        errors.append(FieldError(
            field="customer_name",
            message=f"Customer name is too long (max {NAME_MAX} characters)"
        ))

    # Телефон (формат Узбекистана)
    phone = data.get("customer_phone")
    if not isinstance(phone, str):
        errors.append(FieldError(field="customer_phone", message="Customer phone is required"))
    elif format_phone(phone) is None:
        errors.append(FieldError(
            field="customer_phone",
            message="Invalid phone number format (must be +998XXXXXXXXX)"
        ))

    # Способ получения
    delivery_type = data.get("delivery_type")
    if delivery_type not in DELIVERY_TYPES:
        errors.append(FieldError(
            field="delivery_type",
            message="Invalid delivery type (must be pickup or delivery)"
        ))

    # Адрес и координаты нужны только для доставки
    if delivery_type == DeliveryType.DELIVERY.value:
        address = data.get("delivery_address_text")
        if not isinstance(address, str) or len(address.strip()) < ADDRESS_MIN:
            errors.append(FieldError(
                field="delivery_address_text",
                message="Delivery address is required for delivery orders"
            ))
        elif len(address.strip()) > ADDRESS_MAX:
            errors.append(FieldError(
                field="delivery_address_text",
                message=f"Delivery address is too long (max {ADDRESS_MAX} characters)"
            ))

        if _present(data, "delivery_lat") and not _in_range(data["delivery_lat"], -90, 90):
            errors.append(FieldError(field="delivery_lat", message="Invalid latitude"))
        if _present(data, "delivery_lng") and not _in_range(data["delivery_lng"], -180, 180):
            errors.append(FieldError(field="delivery_lng", message="Invalid longitude"))

    # Оплата
    if data.get("payment_type") not in PAYMENT_TYPES:
        errors.append(FieldError(
            field="payment_type",
            message="Invalid payment type (must be cash, card, or transfer)"
        ))

    # Комментарий
    comment = data.get("comment")
    if comment is not None:
        if not isinstance(comment, str):
            errors.append(FieldError(field="comment", message="Comment must be a string"))
        elif len(comment) > COMMENT_MAX:
            errors.append(FieldError(
                field="comment",
                message=f"Comment is too long (max {COMMENT_MAX} characters)"
            ))

    # Товары
    items = data.get("items")
    if not isinstance(items, list) or not items:
        errors.append(FieldError(field="items", message="At least one item is required"))
    elif len(items) > MAX_ITEMS:
        errors.append(FieldError(field="items", message=f"Too many items (max {MAX_ITEMS})"))
    else:
        for index, item in enumerate(items):
            errors.extend(_validate_item(item, index))

    return errors


def _sanitize(data: Dict[str, Any]) -> SanitizedOrder:
    """Вызывается только для уже проверенных данных."""
    items = [
        SanitizedOrderItem(
            product_id=item["product_id"].lower(),
            variant_id=item["variant_id"].lower() if _present(item, "variant_id") else None,
            quantity=math.floor(item["quantity"]),
            unit_price=math.floor(item["unit_price"]),
            cost_price=math.floor(item["cost_price"]),
            product_name=sanitize_text(item["product_name"], PRODUCT_NAME_MAX),
        )
        for item in data["items"]
    ]

    order = SanitizedOrder(
        customer_name=sanitize_text(data["customer_name"], NAME_MAX),
        customer_phone=format_phone(data["customer_phone"]),
        delivery_type=data["delivery_type"],
        payment_type=data["payment_type"],
        items=items,
    )

    if order.delivery_type == DeliveryType.DELIVERY:
        order.delivery_address_text = sanitize_text(data["delivery_address_text"], ADDRESS_MAX)
        order.delivery_lat = data.get("delivery_lat")
        order.delivery_lng = data.get("delivery_lng")

    comment: Optional[str] = data.get("comment")
    if comment:
        order.comment = sanitize_text(comment, COMMENT_MAX) or None

    return order


def validate_order_input(payload: Any) -> ValidationResult:
    """
    Проверить и очистить заказ.

    Пример:
        result = validate_order_input(await request.json())
        if not result.valid:
            return {"error": "Validation failed", "details": result.errors}
        order = result.data
    """
    if not isinstance(payload, dict):
        return ValidationResult(
            valid=False,
            errors=[FieldError(field="root", message="Invalid request body")]
        )

    errors = _collect_errors(payload)
    if errors:
        return ValidationResult(valid=False, errors=errors)

    return ValidationResult(valid=True, data=_sanitize(payload))
