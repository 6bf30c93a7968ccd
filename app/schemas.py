# app/schemas.py
"""
📊 СХЕМЫ ДАННЫХ (Pydantic)

- SanitizedOrder / SanitizedOrderItem - заказ ПОСЛЕ валидации и очистки.
  Только эти данные передаются дальше (каталог, БД, уведомление).
- FieldError / ValidationResult - результат валидации.
- NotifyOrderPayload - тело запроса /notify-telegram.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from infrastructure.database.models import DeliveryType, PaymentType

# ==========================================
# РЕЗУЛЬТАТ ВАЛИДАЦИИ
# ==========================================

class FieldError(BaseModel):
    field: str
    message: str


# ==========================================
# ОЧИЩЕННЫЙ ЗАКАЗ
# ==========================================

class SanitizedOrderItem(BaseModel):
    product_id: str
    variant_id: Optional[str] = None
    quantity: int
    unit_price: int
    cost_price: int
    product_name: str

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class SanitizedOrder(BaseModel):
    """
    Заказ, которому можно доверять.

    Для самовывоза поля адреса и координат всегда None.
    """
    customer_name: str
    customer_phone: str
    delivery_type: DeliveryType
    payment_type: PaymentType
    items: List[SanitizedOrderItem]
    delivery_lat: Optional[float] = None
    delivery_lng: Optional[float] = None
    delivery_address_text: Optional[str] = None
    comment: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool
    errors: List[FieldError] = Field(default_factory=list)
    data: Optional[SanitizedOrder] = None


# ==========================================
# /notify-telegram
# ==========================================

class NotifyOrderItem(BaseModel):
    product_name_snapshot: str
    quantity: int
    unit_price: int = 0
    line_total: int


class NotifyOrder(BaseModel):
    """Уже созданный заказ (как его отдаёт БД), вместе со строками."""
    id: Optional[str] = None
    order_number: str
    customer_name: str
    customer_phone: str
    delivery_type: DeliveryType
    delivery_address_text: Optional[str] = None
    payment_type: PaymentType
    total_amount: int
    comment: Optional[str] = None
    items: List[NotifyOrderItem] = Field(default_factory=list)


class NotifyOrderPayload(BaseModel):
    order: Optional[NotifyOrder] = None
