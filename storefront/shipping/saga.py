"""
Shipping label purchase.

Buying a label is four dependent calls to the aggregator: put the shipment in the cart,
pay for it, generate the label, get the print link. There is no way to undo a payment from
here, so a failure after checkout is reported with enough context for someone to finish or
refund the label by hand.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .client import MelhorEnvioClient
from ..core.config import settings
from ..core.exceptions import StorefrontError, ShippingStepFailedError
from ..schemas.shipping import LabelPurchaseRequest, LabelPurchaseResponse

logger = logging.getLogger(__name__)

STEP_CART = "cart"
STEP_CHECKOUT = "checkout"
STEP_GENERATE = "generate"
STEP_PRINT = "print"


def build_cart_body(request: LabelPurchaseRequest) -> Dict[str, Any]:
    options = request.options
    agency = request.agency_id
    if agency is None and settings.MELHOR_ENVIO_DEFAULT_AGENCY_ID:
        agency = settings.MELHOR_ENVIO_DEFAULT_AGENCY_ID

    body_options: Dict[str, Any] = {
        "platform": options.platform or settings.MELHOR_ENVIO_PLATFORM_NAME,
        "insurance_value": options.insurance_value,
        "receipt": options.receipt,
        "own_hand": options.own_hand,
        "reverse": options.reverse,
        "non_commercial": options.non_commercial,
    }
    if options.invoice is not None:
        body_options["invoice"] = options.invoice
    if options.tags is not None:
        body_options["tags"] = options.tags

    body: Dict[str, Any] = {
        "service": str(request.service_id),
        "agency": agency,
        "from": request.from_address.model_dump(exclude_none=True),
        "to": request.to_address.model_dump(exclude_none=True),
        "volumes": [volume.model_dump() for volume in request.volumes],
        "options": body_options,
    }
    if request.products:
        body["products"] = request.products
    return body


class LabelPurchase:
    """Runs the purchase steps in order, keeping track of which ones went through."""

    def __init__(self, client: MelhorEnvioClient):
        self.client = client
        self.completed_steps: List[str] = []
        self.label_id: Optional[str] = None

    @property
    def requires_manual_reconciliation(self) -> bool:
        return STEP_CHECKOUT in self.completed_steps

    def _step(self, name: str, call: Callable[[], Any]) -> Any:
        try:
            result = call()
        except StorefrontError as e:
            logger.error(
                f"Label purchase failed at step '{name}' after {self.completed_steps} (label {self.label_id})"
            )
            raise ShippingStepFailedError(
                failed_step=name,
                completed_steps=list(self.completed_steps),
                label_id=self.label_id,
                requires_manual_reconciliation=self.requires_manual_reconciliation,
                upstream_message=e.user_message,
                upstream_status=getattr(e, "upstream_status", None)
            )
        self.completed_steps.append(name)
        return result

    def run(self, request: LabelPurchaseRequest) -> LabelPurchaseResponse:
        cart_data = self._step(STEP_CART, lambda: self.client.add_to_cart(build_cart_body(request)))

        label_id = cart_data.get("id") or (cart_data.get("data") or {}).get("id")
        if not label_id:
            raise ShippingStepFailedError(
                failed_step=STEP_CART,
                completed_steps=[],
                label_id=None,
                requires_manual_reconciliation=False,
                upstream_message="Label id not returned by the cart"
            )
        self.label_id = str(label_id)
        labels = [self.label_id]

        checkout = self._step(STEP_CHECKOUT, lambda: self.client.checkout(labels))
        generate = self._step(STEP_GENERATE, lambda: self.client.generate(labels))
        print_result = self._step(STEP_PRINT, lambda: self.client.print_labels(labels, public=request.print_public))

        logger.info(f"Label {self.label_id} purchased, generated and ready to print")
        return LabelPurchaseResponse(
            label_id=self.label_id,
            checkout=checkout,
            generate=generate,
            print_result=print_result
        )
