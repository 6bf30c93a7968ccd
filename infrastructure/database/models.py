# infrastructure/database/models.py
"""
Здесь мы описываем структуру таблиц в базе данных.

Каждый класс = одна таблица в БД.
Все ID = UUID в виде строки, все деньги = целые числа (сумы, без копеек).

Таблицы products и product_variants ведёт админка магазина,
сервис заказов их только читает.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    BigInteger,    # Деньги (целые, в минимальных единицах)
    Integer,       # Количество
    Float,         # Координаты
    String,        # Текст фиксированной длины
    Text,          # Текст любой длины
    DateTime,
    ForeignKey,
    Enum,
    Boolean,
    Column
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


# ==========================================
# ENUMS (Перечисления)
# ==========================================

class DeliveryType(str, PyEnum):
    PICKUP = "pickup"       # Самовывоз
    DELIVERY = "delivery"   # Доставка курьером


class PaymentType(str, PyEnum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class OrderStatus(str, PyEnum):
    """
    Статусы заказа.

    Сервис заказов всегда создаёт заказ со статусом NEW,
    остальные статусы выставляет админка.
    """
    NEW = "new"
    PROCESSING = "processing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELED = "canceled"


# ==========================================
# МОДЕЛЬ: Product (Таблица products)
# ==========================================

class Product(Base):
    """
    Товар в каталоге.

    Заказ может ссылаться только на существующий товар с is_active = True.
    """
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_uuid)

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True, unique=True)
    sku = Column(String(100), nullable=True)

    price = Column(BigInteger, nullable=False, default=0)
    # Цена продажи

    cost_price = Column(BigInteger, nullable=False, default=0)
    # Себестоимость

    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        index=True
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    variants = relationship("ProductVariant", back_populates="product")

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"


# ==========================================
# МОДЕЛЬ: ProductVariant (Таблица product_variants)
# ==========================================

class ProductVariant(Base):
    """
    Вариант товара (размер, фасовка и т.д.).

    price_override / cost_price_override = None
    значит "берём цену самого товара".
    """
    __tablename__ = "product_variants"

    id = Column(String(36), primary_key=True, default=_uuid)

    product_id = Column(
        String(36),
        ForeignKey("products.id"),
        nullable=False,
        index=True
    )

    name = Column(String(255), nullable=False, default="")
    sku = Column(String(100), nullable=True)

    price_override = Column(BigInteger, nullable=True)
    cost_price_override = Column(BigInteger, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    product = relationship("Product", back_populates="variants")


# ==========================================
# МОДЕЛЬ: Order (Таблица orders)
# ==========================================

class Order(Base):
    """
    Таблица заказов.

    Примерно так это выглядит в БД:
    order_number      | customer_name | customer_phone | delivery_type | total_amount | status
    XOZ-20240121-0042 | Ali Valiyev   | +998901234567  | pickup        | 30000        | new
    """
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)

    order_number = Column(
        String(32),
        nullable=False,
        index=True
    )
    # Номер для людей: XOZ-YYYYMMDD-NNNN (уникальность не гарантируется)

    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=False, index=True)

    # ==========================================
    # Доставка
    # ==========================================
    delivery_type = Column(Enum(DeliveryType), nullable=False)
    delivery_lat = Column(Float, nullable=True)
    delivery_lng = Column(Float, nullable=True)
    delivery_address_text = Column(String(500), nullable=True)

    payment_type = Column(Enum(PaymentType), nullable=False)

    comment = Column(Text, nullable=True)

    total_amount = Column(BigInteger, nullable=False, default=0)

    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.NEW,
        nullable=False,
        index=True
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        index=True
    )
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    items = relationship("OrderItem", back_populates="order")

    def __repr__(self):
        return f"<Order(id={self.id}, number='{self.order_number}', total={self.total_amount})>"


# ==========================================
# МОДЕЛЬ: OrderItem (Таблица order_items)
# ==========================================

class OrderItem(Base):
    """
    Строка заказа.

    Это снимок на момент заказа: название и цены копируются,
    чтобы последующие изменения каталога не меняли старые заказы.
    """
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=_uuid)

    order_id = Column(
        String(36),
        ForeignKey("orders.id"),
        nullable=False,
        index=True
    )

    product_id = Column(String(36), ForeignKey("products.id"), nullable=True)
    variant_id = Column(String(36), ForeignKey("product_variants.id"), nullable=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(BigInteger, nullable=False)
    line_total = Column(BigInteger, nullable=False)
    # unit_price * quantity

    cost_price_snapshot = Column(BigInteger, nullable=False, default=0)
    product_name_snapshot = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem(id={self.id}, product='{self.product_name_snapshot}', qty={self.quantity})>"
