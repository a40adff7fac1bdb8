from sqlalchemy import Column, String, Integer, Float, DateTime, Text, CheckConstraint
from datetime import datetime, timezone
import uuid

from ..database.core import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price > 0", name="ck_products_price_positive"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    image_url = Column(String, nullable=True)
    category = Column(String, nullable=False, index=True)
    color = Column(String, nullable=False)
    model = Column(String, nullable=False)
    # Physical dimensions, required for shipping quotes
    weight = Column(Float, nullable=True)  # kg
    width = Column(Float, nullable=True)  # cm
    height = Column(Float, nullable=True)  # cm
    length = Column(Float, nullable=True)  # cm
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
