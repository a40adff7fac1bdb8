from sqlalchemy import Column, String, ForeignKey, JSON, DateTime
from datetime import datetime, timezone
import uuid

from ..database.core import Base


class UserCart(Base):
    __tablename__ = "user_carts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, unique=True)
    # Line entries as a JSON array of {"product_id": str, "quantity": int}
    items = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
