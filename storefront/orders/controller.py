from fastapi import APIRouter, status
from typing import List, Optional, Union

from ..database.core import DbSession
from ..auth.service import CurrentCaller, AdminCaller
from ..schemas.orders import (
    CreateOrderRequest, CreateOrderResponse, OrderResponse, AdminOrderView, ShipmentUpdate
)
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/", response_model=CreateOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    current_caller: CurrentCaller,
    db: DbSession,
    order_data: Optional[CreateOrderRequest] = None
):
    """Create a pending order from the caller's cart, optionally with a chosen shipping service"""
    shipping = order_data.shipping if order_data else None
    order = OrderService.build_order(db, current_caller, shipping)
    return CreateOrderResponse(
        order_id=order.id,
        subtotal=order.subtotal,
        shipping_fee=order.shipping_fee,
        total=order.total,
        status=order.status
    )


# The payload shape depends on the caller role, so no single response_model applies
@router.get("/", response_model=None)
async def list_orders(current_caller: CurrentCaller, db: DbSession) -> List[Union[AdminOrderView, OrderResponse]]:
    """List orders, newest first. Admins get every order with customer and product details."""
    orders = OrderService.list_orders(db, current_caller)
    if current_caller.is_admin:
        return orders
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, current_caller: CurrentCaller, db: DbSession):
    """Get a single order (own orders only, unless admin)"""
    return OrderResponse.model_validate(OrderService.get_order(db, current_caller, order_id))


@router.put("/{order_id}/shipment", response_model=OrderResponse)
async def mark_order_shipped(order_id: str, shipment: ShipmentUpdate, admin: AdminCaller, db: DbSession):
    """Mark an order as shipped or not shipped (admin only)"""
    order = OrderService.mark_shipped(db, order_id, shipment.shipped)
    return OrderResponse.model_validate(order)
