from fastapi import APIRouter
from typing import List, Optional
from pydantic import BaseModel, Field

from ..database.core import DbSession
from ..auth.service import CurrentCaller
from ..schemas.products import ProductResponse
from .service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


class AddToCartRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class CartLine(BaseModel):
    product_id: str
    quantity: int
    # None when the product was removed from the catalog after being added
    product: Optional[ProductResponse] = None


class CartResponse(BaseModel):
    items: List[CartLine]
    success: bool = True
    message: str = ""


@router.get("/", response_model=CartResponse)
async def get_cart(current_caller: CurrentCaller, db: DbSession):
    """Get the caller's cart with product details"""
    lines = CartService.get_cart_with_products(db, current_caller.id)
    return CartResponse(
        items=[CartLine.model_validate(line, from_attributes=True) for line in lines],
        message="Cart retrieved successfully"
    )


@router.post("/", response_model=CartResponse)
async def add_to_cart(request: AddToCartRequest, current_caller: CurrentCaller, db: DbSession):
    """Add a product to the caller's cart"""
    CartService.add_item(db, current_caller.id, request.product_id, request.quantity)
    lines = CartService.get_cart_with_products(db, current_caller.id)
    return CartResponse(
        items=[CartLine.model_validate(line, from_attributes=True) for line in lines],
        message="Product added to cart successfully"
    )
