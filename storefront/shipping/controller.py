from fastapi import APIRouter, Depends
from typing import Annotated, Any

from ..auth.service import CurrentCaller, AdminCaller
from ..schemas.shipping import QuoteRequest, TrackRequest, LabelPurchaseRequest, LabelPurchaseResponse
from .client import MelhorEnvioClient, get_shipping_gateway
from .saga import LabelPurchase
from .service import ShippingService

ShippingGateway = Annotated[MelhorEnvioClient, Depends(get_shipping_gateway)]

router = APIRouter(prefix="/shipping", tags=["Shipping"])


@router.post("/quote")
async def quote_shipping(quote_request: QuoteRequest, gateway: ShippingGateway) -> Any:
    """Shipping quote for a package to a destination postal code (public)"""
    return ShippingService.quote(gateway, quote_request)


@router.post("/track")
async def track_shipment(track_request: TrackRequest, current_caller: CurrentCaller, gateway: ShippingGateway) -> Any:
    return ShippingService.track(gateway, track_request.orders)


@router.post("/labels", response_model=LabelPurchaseResponse)
async def purchase_label(label_request: LabelPurchaseRequest, admin: AdminCaller, gateway: ShippingGateway):
    """Buy, generate and get the print link for a shipping label (admin only)"""
    return LabelPurchase(gateway).run(label_request)
