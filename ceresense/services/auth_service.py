import logging
from datetime import datetime
from typing import Callable

from ceresense.repositories.user_repository import UserRepository
from ceresense.schemas.auth import (
    RegisterRequest, LoginRequest, ForgotPasswordRequest, ResetPasswordRequest,
    validate_register, validate_login, validate_forgot_password, validate_reset_password,
)
from ceresense.schemas.user import serialize_user
from ceresense.utils.email import EmailNotifier, otp_email_html, reset_confirmation_html
from ceresense.utils.exceptions import (
    ValidationException, DuplicateEmailException, DuplicateUsernameException,
    InvalidCredentialsException, InvalidOTPException, NotificationException,
)
from ceresense.utils.security import PasswordHasher, TokenIssuer, OtpGenerator, utcnow

logger = logging.getLogger(__name__)

# Returned whether or not the address belongs to an account
FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, you will receive a password reset code"
RESET_PASSWORD_MESSAGE = "Password has been reset successfully"


def _raise_if_invalid(violations: list[dict]) -> None:
    if violations:
        raise ValidationException(violations)


class AuthService:
    """
    Registration, login and OTP password recovery.

    Every collaborator is handed in explicitly; ``ceresense.dependencies``
    builds one per request.
    """

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        otps: OtpGenerator,
        notifier: EmailNotifier,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.otps = otps
        self.notifier = notifier
        self.clock = clock

    def _session_for(self, user) -> dict:
        access_token = self.tokens.sign({
            "sub":      user.id,
            "username": user.username,
            "role":     user.role.value,
        })
        return {
            "accessToken": access_token,
            "tokenType":   "Bearer",
            "user":        serialize_user(user),
        }

    # ─── Register ─────────────────────────────────────────────────────────────
    def register(self, data: RegisterRequest) -> dict:
        _raise_if_invalid(validate_register(data))
        email = data.email.strip()
        username = data.username.strip()

        # Fast path only; the UNIQUE constraints in the store are the real guard
        if self.users.find_by_email(email):
            raise DuplicateEmailException()
        if self.users.find_by_username(username):
            raise DuplicateUsernameException()

        user = self.users.create(
            full_name=data.fullName.strip(),
            username=username,
            email=email,
            password_hash=self.hasher.hash(data.password),
        )
        logger.info(f"New user registered: {user.username} ({user.email})")
        return self._session_for(user)

    # ─── Login ────────────────────────────────────────────────────────────────
    def login(self, data: LoginRequest) -> dict:
        _raise_if_invalid(validate_login(data))
        identifier = data.username.strip()

        user = self.users.find_by_username(identifier) or self.users.find_by_email(identifier)
        if not user or not self.hasher.verify(data.password, user.password):
            logger.info(f"Failed login attempt for '{identifier}'")
            raise InvalidCredentialsException()

        return self._session_for(user)

    # ─── Forgot Password ──────────────────────────────────────────────────────
    def forgot_password(self, data: ForgotPasswordRequest) -> dict:
        """
        Issues a fresh OTP and mails it. Unknown addresses get the same
        response as known ones. If the mail cannot be sent the OTP stays
        stored (a later request overwrites it) and NotificationException
        is raised.
        """
        _raise_if_invalid(validate_forgot_password(data))
        email = data.email.strip()

        user = self.users.find_by_email(email)
        if not user:
            return {"message": FORGOT_PASSWORD_MESSAGE}

        otp_code = self.otps.generate()
        self.users.set_otp_code(email, otp_code, self.otps.expiry(self.clock()))

        sent = self.notifier.send(
            user.email,
            "Password Reset Code",
            otp_email_html(user.fullName, otp_code, self.otps.expire_minutes),
        )
        if not sent:
            logger.error(f"Could not deliver password reset code to user {user.id}")
            raise NotificationException("Failed to send reset email. Please try again later.")

        return {"message": FORGOT_PASSWORD_MESSAGE}

    # ─── Reset Password ───────────────────────────────────────────────────────
    def reset_password(self, data: ResetPasswordRequest) -> dict:
        _raise_if_invalid(validate_reset_password(data))
        email = data.email.strip()

        user = self.users.find_by_otp_code(email, data.otp.strip(), now=self.clock())
        if not user:
            raise InvalidOTPException()

        self.users.update_password(user.id, self.hasher.hash(data.newPassword))
        logger.info(f"Password reset via OTP for user {user.id}")

        # The reset is committed; a failed confirmation mail does not undo it
        sent = self.notifier.send(
            user.email,
            "Password Reset Successful",
            reset_confirmation_html(user.fullName),
        )
        if not sent:
            logger.warning(f"Password reset confirmation email to user {user.id} was not delivered")

        return {"message": RESET_PASSWORD_MESSAGE}

    # ─── Principal lookup ─────────────────────────────────────────────────────
    def validate_user(self, user_id: str) -> dict | None:
        user = self.users.find_by_id(user_id)
        if not user:
            return None
        return serialize_user(user)
