from pydantic import BaseModel, Field
from typing import Optional, Union, Dict, Any


class PaymentNotification(BaseModel):
    """
    Payment provider callback body. The classic format is {"topic": "payment", "id": ...};
    the newer one is {"type": "payment", "data": {"id": ...}}.
    """
    topic: Optional[str] = None
    id: Optional[Union[str, int]] = None
    type: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def resolved_topic(self) -> Optional[str]:
        return self.topic or self.type

    def resolved_payment_id(self) -> Optional[str]:
        payment_id = self.id
        if payment_id is None and self.data:
            payment_id = self.data.get("id")
        if payment_id is None or str(payment_id).strip() == "":
            return None
        return str(payment_id).strip()


class PaymentRecord(BaseModel):
    """Authoritative payment data as returned by the provider"""
    id: str
    status: Optional[str] = None
    external_reference: Optional[str] = None


class PreferenceRequest(BaseModel):
    order_id: str = Field(..., min_length=1)


class PreferenceResponse(BaseModel):
    init_point: str
    preference_id: str
    order_id: str
    total: float


class ReconciliationResult(BaseModel):
    order_id: str
    payment_id: str
    success: bool = True
    message: str = "Order status updated and stock decreased successfully"
