from sqlalchemy import Column, String, DateTime
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
import uuid

from ..database.core import Base


class User(Base):
    """
    SQLAlchemy model representing a store user.
    Credentials live with the login service; this record carries profile and role only.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    avatar_url = Column(String, nullable=True)
    role = Column(String, nullable=False, default="customer")
    phone = Column(String, nullable=False, default="")
    address = Column(String, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<User(email='{self.email}', role='{self.role}')>"


class UserProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    avatar_url: Optional[str] = None
    role: str
    phone: str = ""
    address: str = ""

    model_config = ConfigDict(from_attributes=True)


class UserProfileUpdate(BaseModel):
    """Only the supplied fields are changed"""
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    phone: Optional[str] = Field(None, max_length=40)
    address: Optional[str] = Field(None, max_length=300)
    avatar_url: Optional[str] = Field(None, max_length=500)
