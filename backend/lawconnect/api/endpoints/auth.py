from typing import Any
from fastapi import APIRouter, Depends, Request, status
from lawconnect.core import security
from lawconnect.core.config import settings
from lawconnect.core.errors import ValidationError
from lawconnect.api.deps import (
    CurrentUser,
    get_current_user,
    get_password_reset_service,
    get_user_service,
)
from lawconnect.models.user import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from lawconnect.services.password_reset import PasswordResetService, ResetTokenNotFoundError
from lawconnect.services.users import UserService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account exists for this email, a password reset link has been sent"

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserCreate,
    users: UserService = Depends(get_user_service),
) -> Any:
    """
    Create a client or lawyer account and log it in.
    """
    user = await users.create_user(user_in)
    token = security.create_access_token(user.id, user.role)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": {"user": UserResponse(**user.model_dump()), "token": token},
    }

@router.post("/login")
async def login(
    credentials: LoginRequest,
    users: UserService = Depends(get_user_service),
) -> Any:
    user = await users.authenticate(credentials.email, credentials.password)
    return {
        "success": True,
        "message": "Login successful",
        "data": {
            "user": UserResponse(**user.model_dump()),
            "token": security.create_access_token(user.id, user.role),
            "refreshToken": security.create_refresh_token(user.id),
        },
    }

@router.get("/me")
async def read_me(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Any:
    user = await users.get_user(current_user.id)
    return {"success": True, "data": {"user": UserResponse(**user.model_dump())}}

@router.put("/profile")
async def update_profile(
    update: UserUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Any:
    user = await users.update_profile(current_user.id, update)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": {"user": UserResponse(**user.model_dump())},
    }

@router.put("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Any:
    await users.change_password(current_user.id, body.current_password, body.new_password)
    return {"success": True, "message": "Password changed successfully"}

@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    resets: PasswordResetService = Depends(get_password_reset_service),
) -> Any:
    """
    Always answers with the same message so the endpoint cannot be used to
    probe which emails are registered. Outside production the reset URL is
    returned directly since no mail is sent.
    """
    reset_url = None
    try:
        _, reset_url = await resets.request_reset(
            body.email,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except ResetTokenNotFoundError:
        logger.info("Password reset requested for unknown email")

    response = {"success": True, "message": FORGOT_PASSWORD_MESSAGE}
    if reset_url and not settings.is_production:
        response["resetUrl"] = reset_url
    return response

@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    resets: PasswordResetService = Depends(get_password_reset_service),
) -> Any:
    try:
        await resets.consume(body.token, body.password)
    except ResetTokenNotFoundError:
        raise ValidationError("Invalid reset token")
    return {"success": True, "message": "Password has been reset successfully"}

@router.post("/logout")
async def logout(current_user: CurrentUser = Depends(get_current_user)) -> Any:
    # Tokens are stateless; the client discards its copy.
    logger.info(f"User {current_user.id} logged out")
    return {"success": True, "message": "Logged out successfully"}
