"""
Request bodies for the auth endpoints and the validation run on them.

The pydantic models only fix the JSON shape. Content rules live in the
``validate_*`` functions, each returning a list of ``{"field", "message"}``
violations (empty when the input is acceptable).
"""
import re

from email_validator import validate_email, EmailNotValidError
from pydantic import BaseModel

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8


# ─── Request Schemas ──────────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    fullName:        str = ""
    username:        str = ""
    email:           str = ""
    password:        str = ""
    confirmPassword: str = ""


class LoginRequest(BaseModel):
    username: str = ""   # username or email
    password: str = ""


class ForgotPasswordRequest(BaseModel):
    email: str = ""


class ResetPasswordRequest(BaseModel):
    email:       str = ""
    otp:         str = ""
    newPassword: str = ""


# ─── Helpers ──────────────────────────────────────────────────────────────────
def _violation(field: str, message: str) -> dict:
    return {"field": field, "message": message}


def _require(errors: list[dict], field: str, value: str, label: str) -> bool:
    if not value or not value.strip():
        errors.append(_violation(field, f"{label} is required"))
        return False
    return True


def check_email(errors: list[dict], field: str, value: str) -> None:
    if not _require(errors, field, value, "Email"):
        return
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        errors.append(_violation(field, "Email must be a valid email address"))


def check_password_strength(errors: list[dict], field: str, value: str) -> None:
    if not _require(errors, field, value, "Password"):
        return
    if len(value) < MIN_PASSWORD_LENGTH:
        errors.append(_violation(field, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"))
        return
    if not (re.search(r"[A-Z]", value) and re.search(r"[a-z]", value)
            and re.search(r"[\d\W]", value)):
        errors.append(_violation(
            field,
            "Password must contain at least 1 uppercase letter, 1 lowercase letter, "
            "and 1 number or special character",
        ))


# ─── Validators ───────────────────────────────────────────────────────────────
def validate_register(data: RegisterRequest) -> list[dict]:
    errors: list[dict] = []
    _require(errors, "fullName", data.fullName, "Full name")
    if _require(errors, "username", data.username, "Username") \
            and len(data.username.strip()) < MIN_USERNAME_LENGTH:
        errors.append(_violation("username", f"Username must be at least {MIN_USERNAME_LENGTH} characters"))
    check_email(errors, "email", data.email)
    check_password_strength(errors, "password", data.password)
    if _require(errors, "confirmPassword", data.confirmPassword, "Password confirmation") \
            and data.confirmPassword != data.password:
        errors.append(_violation("confirmPassword", "Passwords do not match"))
    return errors


def validate_login(data: LoginRequest) -> list[dict]:
    errors: list[dict] = []
    _require(errors, "username", data.username, "Username or email")
    _require(errors, "password", data.password, "Password")
    return errors


def validate_forgot_password(data: ForgotPasswordRequest) -> list[dict]:
    errors: list[dict] = []
    check_email(errors, "email", data.email)
    return errors


def validate_reset_password(data: ResetPasswordRequest) -> list[dict]:
    errors: list[dict] = []
    check_email(errors, "email", data.email)
    _require(errors, "otp", data.otp, "OTP code")
    check_password_strength(errors, "newPassword", data.newPassword)
    return errors
