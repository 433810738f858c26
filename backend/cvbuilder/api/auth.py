from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from cvbuilder.auth import create_access_token, get_current_user, hash_password, verify_password
from cvbuilder.database import get_db
from cvbuilder.errors import APIError
from cvbuilder.models import User
from cvbuilder.schemas import LoginRequest, RegisterRequest, UserResponse, envelope

router = APIRouter()


def serialize_user(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(by_alias=True, mode="json")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == request.email))
    if result.scalar_one_or_none():
        raise APIError("User already exists with this email", 400)

    user = User(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        password_hash=hash_password(request.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    return envelope(
        data={"user": serialize_user(user), "token": create_access_token(user.id)},
        message="User registered successfully",
    )


@router.post("/login")
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
        )

    return envelope(
        data={"user": serialize_user(user), "token": create_access_token(user.id)},
        message="Login successful",
    )


@router.get("/verify")
async def verify(user: User = Depends(get_current_user)):
    return envelope(data={"user": serialize_user(user)})


@router.post("/refresh")
async def refresh(user: User = Depends(get_current_user)):
    return envelope(data={"token": create_access_token(user.id)}, message="Token refreshed")
