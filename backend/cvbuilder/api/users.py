from fastapi import APIRouter, Depends
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from cvbuilder.api.auth import serialize_user
from cvbuilder.auth import get_current_user, hash_password, verify_password
from cvbuilder.database import get_db
from cvbuilder.errors import APIError
from cvbuilder.models import CV, User
from cvbuilder.schemas import PasswordChange, UserUpdate, envelope

router = APIRouter()


@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)):
    return envelope(data={"user": serialize_user(user)})


@router.patch("/profile")
async def update_profile(
    update: UserUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    update_data = update.model_dump(exclude_unset=True, exclude={"preferences"})
    for field, value in update_data.items():
        setattr(user, field, value.strip() if isinstance(value, str) else value)

    if update.preferences is not None:
        # Merge so a partial update keeps the other preference keys
        changes = update.preferences.model_dump(by_alias=True, exclude_none=True)
        user.preferences = {**(user.preferences or {}), **changes}

    await db.commit()
    await db.refresh(user)

    return envelope(data={"user": serialize_user(user)}, message="Profile updated successfully")


@router.patch("/password")
async def change_password(
    change: PasswordChange,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not verify_password(change.current_password, user.password_hash):
        raise APIError("Current password is incorrect", 400)

    user.password_hash = hash_password(change.new_password)
    await db.commit()

    return envelope(message="Password updated successfully")


@router.delete("/account")
async def delete_account(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await db.execute(delete(CV).where(CV.user_id == user.id))
    await db.delete(user)
    await db.commit()

    return envelope(message="Account deleted successfully")
