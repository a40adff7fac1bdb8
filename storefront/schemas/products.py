from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class ProductBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=5)
    price: float = Field(..., gt=0)
    stock: int = Field(..., ge=0)
    category: str = Field(..., min_length=2, max_length=100)
    color: str = Field(..., min_length=2, max_length=100)
    model: str = Field(..., min_length=2, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    weight: Optional[float] = Field(None, gt=0, description="Weight in kg")
    width: Optional[float] = Field(None, gt=0, description="Width in cm")
    height: Optional[float] = Field(None, gt=0, description="Height in cm")
    length: Optional[float] = Field(None, gt=0, description="Length in cm")

    # 'model' is a catalog attribute here, not a pydantic namespace
    model_config = ConfigDict(protected_namespaces=())


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    """Partial update; only fields present in the request are applied"""
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, min_length=5)
    price: Optional[float] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=2, max_length=100)
    color: Optional[str] = Field(None, min_length=2, max_length=100)
    model: Optional[str] = Field(None, min_length=2, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    weight: Optional[float] = Field(None, gt=0)
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    length: Optional[float] = Field(None, gt=0)

    model_config = ConfigDict(protected_namespaces=())


class ProductResponse(ProductBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class ProductDisplay(BaseModel):
    """Display snapshot of a product used when composing admin order views"""
    id: str
    name: str
    model: str
    color: str
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())
