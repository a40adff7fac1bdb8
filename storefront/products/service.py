from sqlalchemy.orm import Session
from sqlalchemy import update, case
from typing import List, Optional, Dict, Iterable, Tuple
from datetime import datetime, timezone
import logging

from .models import Product
from ..schemas.products import ProductCreate, ProductUpdate
from ..core.exceptions import ProductNotFoundError, InvalidInputError

logger = logging.getLogger(__name__)


class ProductService:

    @staticmethod
    def list_products(db: Session, category: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Product]:
        query = db.query(Product)
        if category:
            query = query.filter(Product.category == category)
        return query.order_by(Product.name).offset(skip).limit(limit).all()

    @staticmethod
    def get_product(db: Session, product_id: str) -> Product:
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise ProductNotFoundError(product_id)
        return product

    @staticmethod
    def get_products_by_ids(db: Session, product_ids: Iterable[str]) -> Dict[str, Product]:
        """Batch lookup keyed by product id; missing ids are simply absent from the result"""
        ids = list(set(product_ids))
        if not ids:
            return {}
        products = db.query(Product).filter(Product.id.in_(ids)).all()
        return {product.id: product for product in products}

    @staticmethod
    def create_product(db: Session, product_data: ProductCreate) -> Product:
        product = Product(**product_data.model_dump())
        db.add(product)
        db.commit()
        db.refresh(product)
        logger.info(f"Created product {product.id} ({product.name})")
        return product

    @staticmethod
    def update_product(db: Session, product_id: str, product_data: ProductUpdate) -> Product:
        product = ProductService.get_product(db, product_id)

        changes = product_data.model_dump(exclude_unset=True)
        required = {"name", "description", "price", "stock", "category", "color", "model"}
        nulled = sorted(field for field in required if field in changes and changes[field] is None)
        if nulled:
            raise InvalidInputError(f"Fields cannot be cleared: {', '.join(nulled)}", context={"fields": nulled})

        for field, value in changes.items():
            setattr(product, field, value)
        product.updated_at = datetime.now(timezone.utc)

        db.commit()
        db.refresh(product)
        logger.info(f"Updated product {product_id}: {sorted(changes)}")
        return product

    @staticmethod
    def delete_product(db: Session, product_id: str) -> None:
        product = ProductService.get_product(db, product_id)
        db.delete(product)
        db.commit()
        logger.info(f"Deleted product {product_id}")

    @staticmethod
    def decrement_stock(db: Session, product_id: str, quantity: int) -> Optional[Tuple[int, int]]:
        """
        Decrease stock by quantity, floored at zero, in a single conditional UPDATE.

        Concurrent decrements are serialized by the store, never by a read-modify-write here.
        Does not commit; the caller owns the unit of work.

        Returns:
            (old_stock, new_stock), or None when the product does not exist.
        """
        old_stock = db.query(Product.stock).filter(Product.id == product_id).scalar()
        if old_stock is None:
            return None

        result = db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(
                stock=case((Product.stock > quantity, Product.stock - quantity), else_=0),
                updated_at=datetime.now(timezone.utc)
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None

        new_stock = db.query(Product.stock).filter(Product.id == product_id).scalar()
        return old_stock, new_stock
