from fastapi import APIRouter

from ..database.core import DbSession
from ..auth.service import CurrentCaller
from .service import UserService
from .models import UserProfileResponse, UserProfileUpdate

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserProfileResponse)
async def get_my_profile(current_caller: CurrentCaller, db: DbSession):
    """Get the authenticated user's profile"""
    return UserService.get_profile(db, current_caller.id)


@router.put("/me", response_model=UserProfileResponse)
async def update_my_profile(
    profile_data: UserProfileUpdate,
    current_caller: CurrentCaller,
    db: DbSession
):
    """Update the authenticated user's name, phone, address or avatar"""
    return UserService.update_profile(db, current_caller.id, profile_data)
