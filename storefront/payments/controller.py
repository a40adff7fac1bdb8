from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from typing import Annotated, Optional
import logging

from ..database.core import DbSession
from ..auth.service import CurrentCaller
from ..core.exceptions import InvalidNotificationError
from ..schemas.payments import PaymentNotification, PreferenceRequest, PreferenceResponse, ReconciliationResult
from .client import MercadoPagoClient, get_payment_gateway
from .reconciler import PaymentReconciler
from .service import PaymentService

logger = logging.getLogger(__name__)

PaymentGateway = Annotated[MercadoPagoClient, Depends(get_payment_gateway)]

router = APIRouter(prefix="/payments", tags=["Payments"])
webhook_router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/preference", response_model=PreferenceResponse)
async def create_payment_preference(
    preference_request: PreferenceRequest,
    current_caller: CurrentCaller,
    db: DbSession,
    gateway: PaymentGateway
):
    """Create a payment preference for one of the caller's pending orders"""
    return PaymentService.create_preference(db, current_caller, preference_request.order_id, gateway)


@webhook_router.post("/payment", response_model=ReconciliationResult)
async def payment_webhook(
    request: Request,
    db: DbSession,
    gateway: PaymentGateway,
    topic: Optional[str] = None,
    id: Optional[str] = None
):
    """
    Payment provider notification endpoint.

    Public: the notification is trusted only after the payment id is looked up at the provider.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    try:
        notification = PaymentNotification.model_validate(payload)
    except ValidationError:
        raise InvalidNotificationError(payload.get("topic") or payload.get("type"))
    # Older notifications carry topic and id in the query string only
    if notification.resolved_topic() is None and topic:
        notification.topic = topic
    if notification.resolved_payment_id() is None and id:
        notification.id = id

    logger.info(f"Payment notification received: topic={notification.resolved_topic()} id={notification.resolved_payment_id()}")
    return PaymentReconciler.reconcile(db, notification, gateway)
