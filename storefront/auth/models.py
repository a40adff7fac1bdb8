from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"

    @classmethod
    def from_stored(cls, value: Optional[str]) -> "Role":
        """Anything that is not 'admin' is treated as a customer."""
        if value and value.strip().lower() == cls.ADMIN.value:
            return cls.ADMIN
        return cls.CUSTOMER


class TokenData(BaseModel):
    user_id: str | None = None


class Caller(BaseModel):
    """The authenticated principal, resolved once per request and passed by value."""
    id: str
    role: Role
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
