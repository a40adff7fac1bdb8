import re
import logging
from typing import Any, Dict, List

from .client import MelhorEnvioClient
from ..core.config import settings
from ..core.exceptions import ConfigurationError, InvalidInputError
from ..schemas.shipping import QuoteRequest

logger = logging.getLogger(__name__)


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value or "")


class ShippingService:

    @staticmethod
    def quote(client: MelhorEnvioClient, quote_request: QuoteRequest) -> Any:
        """Ask the aggregator for the services and prices available to a postal code"""
        from_postal_code = digits_only(settings.MELHOR_ENVIO_FROM_POSTAL_CODE)
        if not from_postal_code:
            raise ConfigurationError("MELHOR_ENVIO_FROM_POSTAL_CODE")

        to_postal_code = digits_only(quote_request.to_postal_code)
        if not to_postal_code:
            raise InvalidInputError("Invalid destination postal code", context={"to_postal_code": quote_request.to_postal_code})

        body: Dict[str, Any] = {
            "from": {"postal_code": from_postal_code},
            "to": {"postal_code": to_postal_code},
            "package": quote_request.package.model_dump(),
            "options": {
                "insurance_value": quote_request.insurance_value,
                "receipt": quote_request.receipt,
                "own_hand": quote_request.own_hand,
            },
        }
        if quote_request.services:
            body["services"] = quote_request.services

        return client.calculate(body)

    @staticmethod
    def track(client: MelhorEnvioClient, label_ids: List[str]) -> Any:
        labels = [label.strip() for label in label_ids if label and label.strip()]
        if not labels:
            raise InvalidInputError('Provide "orders": [label ids]')
        return client.track(labels)
