from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm

from database import get_transaction_manager
from errors import EmailExistsError, UsernameExistsError
from models.user import User
from rate_limit import limiter, rate_limited_user
from repositories.unit_of_work import TransactionManager
from schemas.auth import (
    ChangePasswordRequest,
    TokenRefresh,
    TokenResponse,
    UserRegister,
    UserResponse,
)
from schemas.common import MessageResponse
from services.auth import (
    create_tokens,
    decode_token,
    get_current_user,
    hash_password,
    user_from_token,
    verify_password,
)
from services.password_service import PasswordService

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def register(
    request: Request,
    user_data: UserRegister,
    tx: TransactionManager = Depends(get_transaction_manager),
):
    """
    Register a new user account and return authentication tokens.

    Body: email, username, password
    Returns: access_token, refresh_token, token_type
    Raises: 409 if email/username exists, 422 if validation fails
    """
    with tx.repositories() as uow:
        if uow.users.email_exists(user_data.email):
            raise EmailExistsError()
        if uow.users.username_exists(user_data.username):
            raise UsernameExistsError()

        # A concurrent registration still loses on the unique constraints
        new_user = uow.users.create(
            email=user_data.email,
            username=user_data.username,
            hashed_password=hash_password(user_data.password),
        )

    return create_tokens(new_user)


@router.post("/login")
@limiter.limit("10/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    tx: TransactionManager = Depends(get_transaction_manager),
):
    """
    Authenticate an existing user and return authentication tokens.

    Form data: username (email or username), password
    Returns: access_token, refresh_token, token_type
    Raises: 401 if invalid credentials
    """
    # OAuth2 form uses the 'username' field for both email and username
    with tx.repositories() as uow:
        user = uow.users.get_by_login(form_data.username)

    if not user or not user.is_active or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email/username or password",
        )

    return create_tokens(user)


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)):
    """
    Logout the current authenticated user.

    Note: Client must clear tokens from storage (stateless JWT)
    """
    return {"message": "Successfully logged out"}


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    token_data: TokenRefresh,
    tx: TransactionManager = Depends(get_transaction_manager),
):
    """
    Obtain new authentication tokens using a valid refresh token.

    Body: refresh_token
    Raises: 401 if token invalid/expired or user not found
    """
    payload = decode_token(token_data.refresh_token)
    user = user_from_token(payload, tx, "refresh")
    return create_tokens(user)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Retrieve the currently authenticated user's profile information."""
    return current_user


@router.post("/change-password", response_model=MessageResponse)
@limiter.limit("10/minute")
def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    current_user: User = Depends(rate_limited_user),
    tx: TransactionManager = Depends(get_transaction_manager),
):
    """
    Change password for the authenticated user.

    Body: current_password, new_password
    Raises: 401 if current password is wrong, 422 if new password invalid

    Every token issued before the change stops working.

    Rate limit: 10 requests per minute per user.
    """
    changed = PasswordService(tx).change_password(
        user_id=current_user.id,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    if not changed:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    return {"message": "Password changed successfully. Please log in again."}
