from fastapi import APIRouter, Depends, status

from ceresense.dependencies import get_auth_service, get_current_user
from ceresense.schemas.auth import (
    RegisterRequest, LoginRequest, ForgotPasswordRequest, ResetPasswordRequest,
)
from ceresense.schemas.common import Envelope, ok
from ceresense.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


# ─── POST /auth/register ──────────────────────────────────────────────────────
@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
    response_model=Envelope,
)
def register(data: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new user with the default `user` role.
    - Email and username must be unique (email is checked first).
    - Username minimum 3 characters.
    - Password minimum 8 characters with upper and lower case letters and a digit or symbol.
    """
    result = auth.register(data)
    return ok("Registration successful", result)


# ─── POST /auth/login ─────────────────────────────────────────────────────────
@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    summary="Login with username or email",
    response_model=Envelope,
)
def login(data: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.login(data)
    return ok("Login successful", result)


# ─── POST /auth/forgot-password ───────────────────────────────────────────────
@router.post(
    "/forgot-password",
    status_code=status.HTTP_200_OK,
    summary="Request an OTP for password reset",
    response_model=Envelope,
)
def forgot_password(data: ForgotPasswordRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Sends a 6-digit OTP (valid 10 minutes) to the registered email address.
    Returns the same message whether or not the email exists.
    """
    result = auth.forgot_password(data)
    return ok(result["message"], None)


# ─── POST /auth/reset-password ────────────────────────────────────────────────
@router.post(
    "/reset-password",
    status_code=status.HTTP_200_OK,
    summary="Reset password using the emailed OTP",
    response_model=Envelope,
)
def reset_password(data: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.reset_password(data)
    return ok(result["message"], None)


# ─── GET /auth/me ─────────────────────────────────────────────────────────────
@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    summary="Get current authenticated user profile",
    response_model=Envelope,
)
def get_me(current_user: dict = Depends(get_current_user)):
    return ok("User profile retrieved", current_user)
