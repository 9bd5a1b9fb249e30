import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ALGORITHM,
    REFRESH_TOKEN_EXPIRE_DAYS,
    SECRET_KEY,
)
from database import get_transaction_manager
from models.user import User
from repositories.unit_of_work import TransactionManager

# OAuth2 scheme for Swagger UI integration
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _bcrypt_input(password: str) -> bytes:
    """Return bytes safe to pass into bcrypt.

    bcrypt only considers the first 72 bytes of input; many implementations
    also error on longer inputs. To avoid surprising truncation and crashes,
    we pre-hash long passwords with SHA-256.
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        return hashlib.sha256(password_bytes).digest()
    return password_bytes


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    hashed = bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(_bcrypt_input(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def _create_token(data: dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    return _create_token(
        data, "access", expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT refresh token."""
    return _create_token(
        data, "refresh", expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    )


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise _credentials_error("Invalid or expired token")


def user_from_token(payload: dict, tx: TransactionManager, expected_type: str) -> User:
    """Resolve the user a decoded token refers to, or raise 401."""
    if payload.get("type") != expected_type:
        raise _credentials_error("Invalid token type")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _credentials_error("Invalid token payload")

    with tx.repositories() as uow:
        user = uow.users.find_by_id(user_id)
    if user is None or not user.is_active:
        raise _credentials_error("User not found")

    # Validate token version (session invalidation check)
    if payload.get("token_ver") != user.token_version:
        raise _credentials_error("Session invalidated. Please log in again.")

    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    tx: TransactionManager = Depends(get_transaction_manager),
) -> User:
    """Get the current authenticated user from the JWT token."""
    return user_from_token(decode_token(token), tx, "access")


def create_tokens(user: User) -> dict:
    """Create both access and refresh tokens for a user."""
    # JWT 'sub' claim must be a string
    claims = {"sub": str(user.id), "token_ver": user.token_version}
    return {
        "access_token": create_access_token(data=claims),
        "refresh_token": create_refresh_token(data=claims),
        "token_type": "bearer",
    }
