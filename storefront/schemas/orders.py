from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional, Any
from datetime import datetime

from .products import ProductDisplay


class ShippingSelection(BaseModel):
    """Carrier service chosen from a shipping quote"""
    service_id: Optional[str] = Field(None, max_length=50)
    # Left untyped so that negative or non-numeric fees surface as INVALID_SHIPPING_VALUE
    fee: Any = None
    name: Optional[str] = Field(None, max_length=100)
    company: Optional[str] = Field(None, max_length=100)
    estimated_days: Optional[int] = Field(None, ge=0)
    postal_code: Optional[str] = Field(None, max_length=20)


class CreateOrderRequest(BaseModel):
    shipping: Optional[ShippingSelection] = None


class CreateOrderResponse(BaseModel):
    order_id: str
    subtotal: float
    shipping_fee: float
    total: float
    status: str
    success: bool = True
    message: str = "Order created successfully"


class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    unit_price: float

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: str
    user_id: str
    items: List[OrderItemResponse] = Field(validation_alias="order_items")
    subtotal: float
    shipping_fee: float
    total: float
    status: str
    created_at: datetime
    paid_at: Optional[datetime] = None
    shipping_service_id: Optional[str] = None
    shipping_name: Optional[str] = None
    shipping_company: Optional[str] = None
    shipping_estimated_days: Optional[int] = None
    destination_postal_code: Optional[str] = None
    shipped: bool = False
    shipped_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CustomerSnapshot(BaseModel):
    """Contact info of the order owner, looked up at read time"""
    id: str
    name: str
    email: str
    phone: str = ""
    address: str = ""

    model_config = ConfigDict(from_attributes=True)


class AdminOrderItemView(OrderItemResponse):
    product: Optional[ProductDisplay] = None


class AdminOrderView(OrderResponse):
    items: List[AdminOrderItemView]
    customer: Optional[CustomerSnapshot] = None


class ShipmentUpdate(BaseModel):
    shipped: bool
