"""
Melhor Envio REST client.

Thin wrapper over the aggregator's v2 endpoints. Every call is a bearer-authenticated JSON
POST with a bounded wait; non-2xx answers become UpstreamServiceError carrying the upstream
status and message.
"""

import logging
from typing import Dict, Any, List, Optional
import requests

from ..core.config import settings
from ..core.exceptions import ConfigurationError, UpstreamServiceError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

SERVICE_NAME = "melhor_envio"


class MelhorEnvioClient:

    def __init__(
        self,
        token: str,
        base_url: str = "https://sandbox.melhorenvio.com.br",
        timeout: float = 10.0,
        user_agent: str = "Storefront",
        session: Optional[requests.Session] = None
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session or requests.Session()

    def _post(self, path: str, body: Dict[str, Any], failure_message: str) -> Any:
        if not self.token:
            raise ConfigurationError("MELHOR_ENVIO_TOKEN")

        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        try:
            response = self.session.post(f"{self.base_url}{path}", json=body, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            logger.error(f"Melhor Envio {path} timed out after {self.timeout}s")
            raise UpstreamTimeoutError(SERVICE_NAME, self.timeout)
        except requests.RequestException as e:
            logger.error(f"Melhor Envio {path} failed: {e}")
            raise UpstreamServiceError(SERVICE_NAME, failure_message, technical_details=str(e))

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get("message") if isinstance(data, dict) else None
            logger.warning(f"Melhor Envio {path} returned {response.status_code}: {message}")
            raise UpstreamServiceError(SERVICE_NAME, message or failure_message, upstream_status=response.status_code)
        return data

    def calculate(self, body: Dict[str, Any]) -> Any:
        return self._post("/api/v2/me/shipment/calculate", body, "Shipping quote failed")

    def add_to_cart(self, body: Dict[str, Any]) -> Dict[str, Any]:
        data = self._post("/api/v2/me/cart", body, "Failed to add the label to the cart")
        return data if isinstance(data, dict) else {}

    def checkout(self, label_ids: List[str]) -> Any:
        """Pays for the labels from the account wallet"""
        return self._post("/api/v2/me/shipment/checkout", {"orders": label_ids}, "Failed to purchase the label")

    def generate(self, label_ids: List[str]) -> Any:
        return self._post("/api/v2/me/shipment/generate", {"orders": label_ids}, "Failed to generate the label")

    def print_labels(self, label_ids: List[str], public: bool = True) -> Any:
        body: Dict[str, Any] = {"orders": label_ids}
        if public:
            body["mode"] = "public"
        return self._post("/api/v2/me/shipment/print", body, "Failed to get the print link")

    def track(self, label_ids: List[str]) -> Any:
        return self._post("/api/v2/me/shipment/tracking", {"orders": label_ids}, "Failed to track the label")


def get_shipping_gateway() -> MelhorEnvioClient:
    """FastAPI dependency; overridden in tests"""
    return MelhorEnvioClient(
        token=settings.MELHOR_ENVIO_TOKEN,
        base_url=settings.MELHOR_ENVIO_BASE_URL,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        user_agent=settings.MELHOR_ENVIO_USER_AGENT
    )
