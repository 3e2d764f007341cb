import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from quizapp.core.security import create_access_token, get_password_hash, verify_password
from quizapp.db.session import get_db
from quizapp.models.user import User
from quizapp.schemas.user import LoginResponse, User as UserSchema, UserCreate, UserLogin, UserUpdate
from quizapp.schemas.quiz import Message

router = APIRouter()
logger = logging.getLogger(__name__)

async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

async def _ensure_unique(db: AsyncSession, username, email, exclude_id=None):
    conditions = []
    if username is not None:
        conditions.append(User.username == username)
    if email is not None:
        conditions.append(User.email == email)
    if not conditions:
        return
    stmt = select(User.user_id).where(or_(*conditions))
    if exclude_id is not None:
        stmt = stmt.where(User.user_id != exclude_id)
    if (await db.execute(stmt)).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username or email already registered"
        )

@router.post("/register", status_code=201)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create a user with a bcrypt-hashed password."""
    await _ensure_unique(db, user.username, user.email)
    try:
        db_user = User(
            username=user.username,
            email=user.email,
            password_hash=get_password_hash(user.password),
            first_name=user.first_name,
            last_name=user.last_name
        )
        db.add(db_user)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Registration failed")
        raise HTTPException(status_code=500, detail="Registration failed")
    return {"message": "User registered successfully", "user_id": db_user.user_id}

@router.post("/login", response_model=LoginResponse)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    """Verify credentials and issue a signed bearer token."""
    result = await db.execute(select(User).where(User.username == credentials.username))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": str(user.user_id), "is_admin": user.is_admin})
    return {
        "message": "Login successful",
        "user": user,
        "access_token": access_token,
        "token_type": "bearer"
    }

@router.get("", response_model=List[UserSchema])
async def list_users(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).order_by(User.user_id))
    return result.scalars().all()

@router.get("/{user_id}", response_model=UserSchema)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_user_or_404(db, user_id)

@router.put("/{user_id}", response_model=Message)
async def update_user(user_id: int, payload: UserUpdate, db: AsyncSession = Depends(get_db)):
    user = await _get_user_or_404(db, user_id)
    changes = {
        field: value for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field not in ("username", "email")
    }
    await _ensure_unique(db, changes.get("username"), changes.get("email"), exclude_id=user_id)
    try:
        for field, value in changes.items():
            setattr(user, field, value)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to update user {user_id}")
        raise HTTPException(status_code=500, detail="Update failed")
    return {"message": "User updated successfully"}

@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await _get_user_or_404(db, user_id)
    try:
        await db.delete(user)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to delete user {user_id}")
        raise HTTPException(status_code=500, detail="Deletion failed")
    return Response(status_code=204)
