# app/api/v1/routes/users.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import User, UserRead, UserUpdate
from app.core.database import get_async_session
from app.core.errors import ValidationError
from app.crud.user import update_user_fields
from app.api.deps import get_current_user

router = APIRouter(tags=["User Management"])
logger = logging.getLogger(__name__)

# Profile fields a user may change here; credentials go through fastapi-users
PROFILE_FIELDS = {"full_name", "wallet_address"}


# 1) GET /users/me
@router.get("/me", response_model=UserRead)
async def read_own_profile(user: User = Depends(get_current_user)):
    """Get current user's profile"""
    return user


# 2) PATCH /users/me
@router.patch("/me", response_model=UserRead)
async def update_own_profile(
    user_update: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update full name and/or wallet address"""
    update_dict = user_update.model_dump(exclude_unset=True, include=PROFILE_FIELDS)
    if not update_dict:
        raise ValidationError("No fields provided for update")

    updated_user = await update_user_fields(user, update_dict, db)
    logger.info(f"User {user.id} updated profile fields: {', '.join(update_dict)}")
    return updated_user
