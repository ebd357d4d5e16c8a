"""
Authentication API endpoints.

Provides:
- User registration (returns a token so onboarding can start immediately)
- Login (JWT token generation)
- Current user
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, EmailStr, Field
import logging

from core.database import get_db
from core.security import verify_password, get_password_hash, create_access_token
from core.auth import get_current_user
from core.exceptions import ConflictError, UnauthorizedError, ValidationError, require_fields
from models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 6
# bcrypt only hashes the first 72 bytes and newer releases refuse longer input.
MAX_PASSWORD_BYTES = 72


class UserRegister(BaseModel):
    """Schema for user registration."""
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str
    full_name: str = Field(alias="fullName")


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


def _user_out(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "fullName": user.full_name,
    }


def _token_for(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new account and return a token for it."""
    email = user_data.email.strip().lower()

    if len(user_data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            field="password",
        )
    if len(user_data.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must not exceed {MAX_PASSWORD_BYTES} bytes (bcrypt limit)",
            field="password",
        )
    require_fields({"full_name": user_data.full_name}, {"full_name": "Full name is required"})

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise ConflictError("User already exists with this email")

    user = User(
        email=email,
        password_hash=get_password_hash(user_data.password),
        full_name=user_data.full_name.strip(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User registered: {user.id}")
    return {
        "message": "User registered successfully",
        "token": _token_for(user),
        "user": _user_out(user),
    }


@router.post("/login")
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Authenticate and return a JWT token."""
    email = credentials.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if user is None or not verify_password(credentials.password, user.password_hash):
        raise UnauthorizedError("Invalid email or password")

    return {
        "message": "Login successful",
        "token": _token_for(user),
        "user": _user_out(user),
    }


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    """Current authenticated user."""
    user = _user_out(current_user)
    user["createdAt"] = current_user.created_at
    return {"user": user}
