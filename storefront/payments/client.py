"""
Mercado Pago REST client.

Covers the two calls the store needs: looking up a payment by id (the authoritative
source for webhook reconciliation) and creating a checkout preference for an order.
"""

import logging
from typing import Dict, Any, Optional
import requests

from ..core.config import settings
from ..core.exceptions import ConfigurationError, UpstreamServiceError, UpstreamTimeoutError
from ..schemas.payments import PaymentRecord

logger = logging.getLogger(__name__)

SERVICE_NAME = "mercado_pago"


class MercadoPagoClient:

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.mercadopago.com",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, json_body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.access_token:
            raise ConfigurationError("MERCADO_PAGO_ACCESS_TOKEN")

        url = f"{self.base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            response = self.session.request(method, url, json=json_body, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            logger.error(f"Mercado Pago {method} {path} timed out after {self.timeout}s")
            raise UpstreamTimeoutError(SERVICE_NAME, self.timeout)
        except requests.RequestException as e:
            logger.error(f"Mercado Pago {method} {path} failed: {e}")
            raise UpstreamServiceError(SERVICE_NAME, "Payment provider unreachable", technical_details=str(e))

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get("message") if isinstance(data, dict) else None
            logger.warning(f"Mercado Pago {method} {path} returned {response.status_code}: {message}")
            raise UpstreamServiceError(
                SERVICE_NAME,
                message or f"Payment provider returned {response.status_code}",
                upstream_status=response.status_code
            )
        return data if isinstance(data, dict) else {}

    def get_payment(self, payment_id: str) -> PaymentRecord:
        """Fetch a payment by id (GET /v1/payments/{id})"""
        data = self._request("GET", f"/v1/payments/{payment_id}")
        if not data.get("id"):
            raise UpstreamServiceError(SERVICE_NAME, "Payment provider returned an empty payment record")

        external_reference = data.get("external_reference")
        return PaymentRecord(
            id=str(data["id"]),
            status=data.get("status"),
            external_reference=str(external_reference) if external_reference else None
        )

    def create_preference(
        self,
        order_id: str,
        total: float,
        payer_email: str,
        notification_url: str,
        back_url_base: str = "",
        currency: str = "BRL"
    ) -> Dict[str, Any]:
        """Create a checkout preference for an order (POST /checkout/preferences)"""
        body: Dict[str, Any] = {
            "items": [
                {
                    "id": order_id,
                    "title": f"Order #{order_id}",
                    "unit_price": float(total),
                    "quantity": 1,
                    "currency_id": currency,
                }
            ],
            "payer": {"email": payer_email},
            "external_reference": order_id,
            "notification_url": notification_url,
        }
        if back_url_base:
            base = back_url_base.rstrip("/")
            body["auto_return"] = "approved"
            body["back_urls"] = {
                "success": f"{base}/success",
                "failure": f"{base}/failure",
                "pending": f"{base}/pending",
            }

        data = self._request("POST", "/checkout/preferences", body)
        if not data.get("init_point"):
            raise UpstreamServiceError(SERVICE_NAME, "Error generating payment preference")

        logger.info(f"Created payment preference {data.get('id')} for order {order_id}")
        return {"init_point": data["init_point"], "preference_id": str(data.get("id", ""))}


def get_payment_gateway() -> MercadoPagoClient:
    """FastAPI dependency; overridden in tests"""
    return MercadoPagoClient(
        access_token=settings.MERCADO_PAGO_ACCESS_TOKEN,
        base_url=settings.MERCADO_PAGO_BASE_URL,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS
    )
