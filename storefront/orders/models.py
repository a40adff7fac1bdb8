from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
import uuid

from ..database.core import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    subtotal = Column(Float, nullable=False)
    # Frozen at creation, never recomputed
    total = Column(Float, nullable=False)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value)
    payment_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    paid_at = Column(DateTime, nullable=True)

    # Shipping selection
    shipping_fee = Column(Float, nullable=False, default=0.0)
    shipping_service_id = Column(String, nullable=True)
    shipping_name = Column(String, nullable=True)
    shipping_company = Column(String, nullable=True)
    shipping_estimated_days = Column(Integer, nullable=True)
    destination_postal_code = Column(String, nullable=True)

    # Fulfillment
    shipped = Column(Boolean, nullable=False, default=False)
    shipped_at = Column(DateTime, nullable=True)

    order_items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    # No foreign key: the line keeps its price even if the product is later removed
    product_id = Column(String(36), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="order_items")
