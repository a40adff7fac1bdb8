from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any, Union


class PackageDimensions(BaseModel):
    height: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    length: float = Field(..., gt=0)
    weight: float = Field(..., gt=0)


class QuoteRequest(BaseModel):
    to_postal_code: str = Field(..., min_length=1)
    package: PackageDimensions
    insurance_value: float = Field(0, ge=0)
    services: Optional[str] = None
    receipt: bool = False
    own_hand: bool = False


class TrackRequest(BaseModel):
    orders: List[str] = Field(..., min_length=1)


class ShipmentAddress(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    document: Optional[str] = None
    company_document: Optional[str] = None
    address: Optional[str] = None
    complement: Optional[str] = None
    number: Optional[str] = None
    district: Optional[str] = None
    postal_code: str = Field(..., min_length=1)
    city: Optional[str] = None
    state_abbr: Optional[str] = None


class ShipmentOptions(BaseModel):
    insurance_value: float = Field(0, ge=0)
    receipt: bool = False
    own_hand: bool = False
    reverse: bool = False
    # Declaration of contents instead of an invoice key
    non_commercial: bool = True
    invoice: Optional[Dict[str, Any]] = None
    platform: Optional[str] = None
    tags: Optional[List[Dict[str, Any]]] = None


class LabelPurchaseRequest(BaseModel):
    """Body for buying a shipping label, mirroring the aggregator's cart format"""
    model_config = ConfigDict(populate_by_name=True)

    service_id: Union[int, str]
    agency_id: Optional[Union[int, str]] = None
    from_address: ShipmentAddress = Field(..., alias="from")
    to_address: ShipmentAddress = Field(..., alias="to")
    volumes: List[PackageDimensions] = Field(..., min_length=1)
    options: ShipmentOptions = Field(default_factory=ShipmentOptions)
    products: List[Dict[str, Any]] = Field(default_factory=list)
    print_public: bool = True


class LabelPurchaseResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Label purchased, generated and ready to print"
    label_id: str
    checkout: Any = None
    generate: Any = None
    print_result: Any = Field(None, alias="print")
