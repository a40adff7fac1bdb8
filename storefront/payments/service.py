from sqlalchemy.orm import Session
import logging

from .client import MercadoPagoClient
from ..auth.models import Caller
from ..orders.models import OrderStatus
from ..orders.service import OrderService
from ..users.service import UserService
from ..schemas.payments import PreferenceResponse
from ..core.config import settings
from ..core.exceptions import AlreadyProcessedError, ConfigurationError

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/api/v1/webhooks/payment"


class PaymentService:

    @staticmethod
    def create_preference(db: Session, caller: Caller, order_id: str, gateway: MercadoPagoClient) -> PreferenceResponse:
        """
        Open a checkout at the payment provider for an existing order.

        The charged amount is always the order's frozen total, and the order id travels as
        the external reference so the payment notification can find the order again.
        """
        if not settings.BACKEND_PUBLIC_URL:
            raise ConfigurationError("BACKEND_PUBLIC_URL")

        order = OrderService.get_order(db, caller, order_id)
        if order.status == OrderStatus.PAID.value:
            raise AlreadyProcessedError(order_id)

        payer_email = caller.email
        if not payer_email:
            payer_email = UserService.get_profile(db, order.user_id).email

        preference = gateway.create_preference(
            order_id=order.id,
            total=order.total,
            payer_email=payer_email,
            notification_url=settings.BACKEND_PUBLIC_URL.rstrip("/") + WEBHOOK_PATH,
            back_url_base=settings.FRONTEND_PUBLIC_URL,
            currency=settings.PAYMENT_CURRENCY
        )

        return PreferenceResponse(
            init_point=preference["init_point"],
            preference_id=preference["preference_id"],
            order_id=order.id,
            total=order.total
        )
