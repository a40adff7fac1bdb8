from fastapi import APIRouter, Query, status
from typing import List, Optional

from ..database.core import DbSession
from ..auth.service import AdminCaller
from ..schemas.products import ProductCreate, ProductUpdate, ProductResponse
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/", response_model=List[ProductResponse])
async def list_products(
    db: DbSession,
    category: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500)
):
    """List the catalog. Public."""
    return ProductService.list_products(db, category, skip, limit)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: DbSession):
    """Get a single product. Public."""
    return ProductService.get_product(db, product_id)


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product_data: ProductCreate, admin: AdminCaller, db: DbSession):
    """Create a product (admin only)"""
    return ProductService.create_product(db, product_data)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, product_data: ProductUpdate, admin: AdminCaller, db: DbSession):
    """Update the supplied fields of a product (admin only)"""
    return ProductService.update_product(db, product_id, product_data)


@router.delete("/{product_id}")
async def delete_product(product_id: str, admin: AdminCaller, db: DbSession):
    """Delete a product (admin only)"""
    ProductService.delete_product(db, product_id)
    return {"success": True, "message": "Product deleted successfully"}
