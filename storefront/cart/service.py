from sqlalchemy.orm import Session
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import logging

from .models import UserCart
from ..products.service import ProductService

logger = logging.getLogger(__name__)


class CartService:

    @staticmethod
    def get_cart(db: Session, user_id: str) -> Optional[UserCart]:
        return db.query(UserCart).filter(UserCart.user_id == user_id).first()

    @staticmethod
    def get_cart_items(db: Session, user_id: str) -> List[Dict[str, Any]]:
        """Raw (product_id, quantity) line entries of the user's cart"""
        cart = CartService.get_cart(db, user_id)
        if not cart:
            return []
        return [dict(item) for item in cart.items or []]

    @staticmethod
    def get_cart_with_products(db: Session, user_id: str) -> List[Dict[str, Any]]:
        """Line entries joined with the current catalog data of each product"""
        items = CartService.get_cart_items(db, user_id)
        products = ProductService.get_products_by_ids(db, [item["product_id"] for item in items])

        lines = []
        for item in items:
            product = products.get(item["product_id"])
            if product is None:
                logger.warning(f"Cart of user {user_id} references missing product {item['product_id']}")
            lines.append({
                "product_id": item["product_id"],
                "quantity": item["quantity"],
                "product": product
            })
        return lines

    @staticmethod
    def add_item(db: Session, user_id: str, product_id: str, quantity: int) -> UserCart:
        """Add a product to the cart, merging with an existing line for the same product"""
        # Raises ProductNotFoundError for unknown products
        ProductService.get_product(db, product_id)

        cart = CartService.get_cart(db, user_id)
        if not cart:
            cart = UserCart(user_id=user_id, items=[])
            db.add(cart)

        items = [dict(item) for item in cart.items or []]
        for item in items:
            if item["product_id"] == product_id:
                item["quantity"] += quantity
                break
        else:
            items.append({"product_id": product_id, "quantity": quantity})

        # Reassign so the JSON column is flagged as modified
        cart.items = items
        cart.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(cart)

        logger.info(f"Added {quantity} x {product_id} to cart of user {user_id}")
        return cart

    @staticmethod
    def clear_cart(db: Session, user_id: str) -> bool:
        """
        Empty the user's cart (the row itself is kept).
        Does not commit; the caller owns the unit of work.
        """
        cart = CartService.get_cart(db, user_id)
        if not cart:
            logger.warning(f"No cart found for user_id: {user_id} to clear.")
            return False
        cart.items = []
        cart.updated_at = datetime.now(timezone.utc)
        return True
