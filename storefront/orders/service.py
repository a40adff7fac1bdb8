from sqlalchemy.orm import Session
from sqlalchemy import update
from typing import List, Optional, Any, Dict, Union
from datetime import datetime, timezone
import logging
import math

from .models import Order, OrderItem, OrderStatus
from ..auth.models import Caller
from ..cart.service import CartService
from ..products.models import Product
from ..products.service import ProductService
from ..users.models import User
from ..schemas.orders import ShippingSelection, AdminOrderView
from ..core.exceptions import (
    EmptyCartError,
    ProductNotFoundError,
    OutOfStockError,
    InsufficientStockError,
    InvalidShippingValueError,
    OrderNotFoundError,
)

logger = logging.getLogger(__name__)


def parse_shipping_fee(value: Any) -> float:
    """A missing fee means free shipping; anything else must be a finite, non-negative number."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise InvalidShippingValueError(value)
    try:
        fee = float(value)
    except (TypeError, ValueError):
        raise InvalidShippingValueError(value)
    if not math.isfinite(fee) or fee < 0:
        raise InvalidShippingValueError(value)
    return round(fee, 2)


def compose_admin_order_view(
    order: Order,
    owner: Optional[User],
    products: Dict[str, Product]
) -> AdminOrderView:
    """
    Read-side join of an order with its owner's contact info and the current display
    fields of each product. Nothing composed here is ever written back.
    """
    items = []
    for item in order.order_items:
        product = products.get(item.product_id)
        items.append({
            "product_id": item.product_id,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "product": product,
        })

    return AdminOrderView.model_validate({
        "id": order.id,
        "user_id": order.user_id,
        "items": items,
        "subtotal": order.subtotal,
        "shipping_fee": order.shipping_fee,
        "total": order.total,
        "status": order.status,
        "created_at": order.created_at,
        "paid_at": order.paid_at,
        "shipping_service_id": order.shipping_service_id,
        "shipping_name": order.shipping_name,
        "shipping_company": order.shipping_company,
        "shipping_estimated_days": order.shipping_estimated_days,
        "destination_postal_code": order.destination_postal_code,
        "shipped": order.shipped,
        "shipped_at": order.shipped_at,
        "customer": owner,
    }, from_attributes=True)


class OrderService:

    @staticmethod
    def build_order(db: Session, caller: Caller, shipping: Optional[ShippingSelection] = None) -> Order:
        """
        Turn the caller's cart into a pending order.

        Every line is validated against the catalog before anything is written, so a
        single bad line leaves both the cart and the order table untouched. Unit prices
        are read from the catalog now and copied into the order.
        """
        cart_items = CartService.get_cart_items(db, caller.id)
        if not cart_items:
            raise EmptyCartError(caller.id)

        shipping_fee = parse_shipping_fee(shipping.fee if shipping else None)

        products = ProductService.get_products_by_ids(db, [item["product_id"] for item in cart_items])

        priced_lines = []
        for item in cart_items:
            product_id = item["product_id"]
            quantity = int(item["quantity"])
            product = products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if product.stock <= 0:
                raise OutOfStockError(product_id, product.name)
            if quantity > product.stock:
                raise InsufficientStockError(product_id, product.name, quantity, product.stock)
            priced_lines.append((product_id, quantity, float(product.price)))

        subtotal = round(sum(unit_price * quantity for _, quantity, unit_price in priced_lines), 2)
        total = round(subtotal + shipping_fee, 2)

        order = Order(
            user_id=caller.id,
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            total=total,
            status=OrderStatus.PENDING.value,
            created_at=datetime.now(timezone.utc),
            shipped=False,
            shipped_at=None,
        )
        if shipping:
            order.shipping_service_id = shipping.service_id
            order.shipping_name = shipping.name
            order.shipping_company = shipping.company
            order.shipping_estimated_days = shipping.estimated_days
            order.destination_postal_code = shipping.postal_code

        order.order_items = [
            OrderItem(position=position, product_id=product_id, quantity=quantity, unit_price=unit_price)
            for position, (product_id, quantity, unit_price) in enumerate(priced_lines)
        ]

        try:
            db.add(order)
            CartService.clear_cart(db, caller.id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(order)
        logger.info(
            f"Created order {order.id} for user {caller.id}: "
            f"{len(priced_lines)} lines, subtotal={subtotal}, shipping={shipping_fee}, total={total}"
        )
        return order

    @staticmethod
    def list_orders(db: Session, caller: Caller) -> List[Union[Order, AdminOrderView]]:
        """Customers see their own orders, admins see every order enriched with owner and product data. Newest first."""
        query = db.query(Order)
        if not caller.is_admin:
            return query.filter(Order.user_id == caller.id).order_by(Order.created_at.desc()).all()

        orders = query.order_by(Order.created_at.desc()).all()

        user_ids = {order.user_id for order in orders}
        owners = {}
        if user_ids:
            owners = {user.id: user for user in db.query(User).filter(User.id.in_(user_ids)).all()}
        products = ProductService.get_products_by_ids(
            db, [item.product_id for order in orders for item in order.order_items]
        )

        return [compose_admin_order_view(order, owners.get(order.user_id), products) for order in orders]

    @staticmethod
    def get_order(db: Session, caller: Caller, order_id: str) -> Order:
        """Admins may read any order, customers only their own"""
        query = db.query(Order).filter(Order.id == order_id)
        if not caller.is_admin:
            query = query.filter(Order.user_id == caller.id)
        order = query.first()
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def mark_shipped(db: Session, order_id: str, shipped: bool) -> Order:
        """Set the shipped flag; the timestamp follows the flag (now when shipped, cleared otherwise)"""
        shipped_at = datetime.now(timezone.utc) if shipped else None
        result = db.execute(
            update(Order)
            .where(Order.id == order_id)
            .values(shipped=shipped, shipped_at=shipped_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            db.rollback()
            raise OrderNotFoundError(order_id)
        db.commit()

        order = db.query(Order).filter(Order.id == order_id).first()
        logger.info(f"Order {order_id} marked shipped={shipped}")
        return order
