"""
Payment reconciliation.

A payment notification is only a hint: the payment is looked up at the provider, and only
an approved payment whose external reference names a pending order moves that order to
paid. The status change and the stock decrements commit together or not at all.
"""

from sqlalchemy.orm import Session
from sqlalchemy import update
from datetime import datetime, timezone
from typing import Optional
import logging

from .client import MercadoPagoClient
from ..orders.models import Order, OrderStatus
from ..products.service import ProductService
from ..schemas.payments import PaymentNotification, PaymentRecord, ReconciliationResult
from ..core.exceptions import (
    InvalidNotificationError,
    PaymentLookupFailedError,
    PaymentNotApprovedError,
    ExternalReferenceMissingError,
    OrderNotFoundError,
    AlreadyProcessedError,
    UpstreamServiceError,
)

logger = logging.getLogger(__name__)

PAYMENT_TOPIC = "payment"
APPROVED = "approved"


class PaymentReconciler:

    @staticmethod
    def lookup_payment(gateway: MercadoPagoClient, payment_id: str) -> PaymentRecord:
        """Timeouts propagate as transient failures; every other lookup failure is final."""
        try:
            return gateway.get_payment(payment_id)
        except UpstreamServiceError as e:
            raise PaymentLookupFailedError(payment_id, technical_details=e.user_message)

    @staticmethod
    def reconcile(db: Session, notification: PaymentNotification, gateway: MercadoPagoClient) -> ReconciliationResult:
        topic = notification.resolved_topic()
        payment_id = notification.resolved_payment_id()
        if topic != PAYMENT_TOPIC or not payment_id:
            raise InvalidNotificationError(topic)

        payment = PaymentReconciler.lookup_payment(gateway, payment_id)
        if payment.status != APPROVED:
            raise PaymentNotApprovedError(payment_id, payment.status)

        order_id = payment.external_reference
        if not order_id:
            raise ExternalReferenceMissingError(payment_id)

        order = db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise OrderNotFoundError(order_id)

        try:
            # Only one delivery can flip pending -> paid; every other one affects zero rows
            result = db.execute(
                update(Order)
                .where(Order.id == order_id, Order.status == OrderStatus.PENDING.value)
                .values(
                    status=OrderStatus.PAID.value,
                    payment_id=payment.id,
                    paid_at=datetime.now(timezone.utc)
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise AlreadyProcessedError(order_id)

            for item in order.order_items:
                PaymentReconciler._decrement_item_stock(db, order_id, item.product_id, item.quantity)

            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Order {order_id} marked as paid by payment {payment.id}")
        return ReconciliationResult(order_id=order_id, payment_id=payment.id)

    @staticmethod
    def _decrement_item_stock(db: Session, order_id: str, product_id: str, quantity: int) -> Optional[int]:
        change = ProductService.decrement_stock(db, product_id, quantity)
        if change is None:
            logger.warning(f"Product {product_id} from order {order_id} not found, stock not updated")
            return None

        old_stock, new_stock = change
        logger.info(f"Product {product_id} stock updated from {old_stock} to {new_stock}")
        return new_stock
