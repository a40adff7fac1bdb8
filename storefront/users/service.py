from sqlalchemy.orm import Session
from typing import Optional
import logging

from .models import User, UserProfileUpdate
from ..core.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_profile(db: Session, user_id: str) -> User:
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return user

    @staticmethod
    def update_profile(db: Session, user_id: str, profile_data: UserProfileUpdate) -> User:
        """Update the caller's own profile; fields left out of the request stay as they are"""
        user = UserService.get_profile(db, user_id)

        changes = profile_data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(user, field, value)

        db.commit()
        db.refresh(user)
        logger.info(f"Updated profile for user {user_id}: {sorted(changes)}")
        return user
