from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ceresense.database import get_db
from ceresense.models.user import UserRole
from ceresense.repositories.user_repository import UserRepository
from ceresense.services.auth_service import AuthService
from ceresense.utils.email import EmailNotifier, email_notifier
from ceresense.utils.exceptions import UnauthorizedException, ForbiddenException, NotFoundException
from ceresense.utils.security import (
    PasswordHasher, TokenIssuer, OtpGenerator,
    password_hasher, token_issuer, otp_generator,
)
from ceresense.utils.storage import FileStorage

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


# ─── Component providers ──────────────────────────────────────────────────────
# Each is a separate dependency so tests can swap one via app.dependency_overrides.

def get_password_hasher() -> PasswordHasher:
    return password_hasher


def get_token_issuer() -> TokenIssuer:
    return token_issuer


def get_otp_generator() -> OtpGenerator:
    return otp_generator


def get_notifier() -> EmailNotifier:
    return email_notifier


@lru_cache
def get_file_storage() -> FileStorage:
    return FileStorage()


def get_auth_service(
    db:       Session        = Depends(get_db),
    hasher:   PasswordHasher = Depends(get_password_hasher),
    tokens:   TokenIssuer    = Depends(get_token_issuer),
    otps:     OtpGenerator   = Depends(get_otp_generator),
    notifier: EmailNotifier  = Depends(get_notifier),
) -> AuthService:
    return AuthService(UserRepository(db), hasher, tokens, otps, notifier)


# ─── Get Current User ─────────────────────────────────────────────────────────
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens:      TokenIssuer = Depends(get_token_issuer),
    auth:        AuthService = Depends(get_auth_service),
) -> dict:
    """
    Validate the JWT Bearer token and return the caller's user projection.
    Raises 401 if the token is missing, invalid, or expired.
    """
    if not credentials:
        raise UnauthorizedException("No authentication token provided")

    payload = tokens.verify(credentials.credentials)
    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise UnauthorizedException("Invalid token payload")

    user = auth.validate_user(user_id)
    if user is None:
        raise NotFoundException("User")
    return user


# ─── Role Guards ──────────────────────────────────────────────────────────────
def require_roles(*roles: UserRole):
    """
    Factory that returns a FastAPI dependency requiring one of the given roles.

    Usage:
        @router.post("/blog")
        def create(current_user = Depends(require_roles(UserRole.ADMIN, UserRole.EDITOR))):
            ...
    """
    allowed = {r.value for r in roles}

    def dependency(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user["role"] not in allowed:
            raise ForbiddenException(
                f"This action requires one of these roles: {sorted(allowed)}"
            )
        return current_user
    return dependency


# ─── Pre-built role dependencies ─────────────────────────────────────────────
def get_admin_user(current_user: dict = Depends(require_roles(UserRole.ADMIN))) -> dict:
    return current_user


def get_editor_or_admin(
    current_user: dict = Depends(require_roles(UserRole.ADMIN, UserRole.EDITOR))
) -> dict:
    return current_user
