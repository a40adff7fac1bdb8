# Central models file to avoid circular imports

from .core import Base

from ..users.models import User
from ..products.models import Product
from ..cart.models import UserCart
from ..orders.models import Order, OrderItem

__all__ = [
    "Base",
    "User",
    "Product",
    "UserCart",
    "Order",
    "OrderItem",
]
