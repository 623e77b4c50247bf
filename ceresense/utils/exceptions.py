from fastapi import HTTPException, status


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES: Machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR      = "VALIDATION_ERROR"
    UNAUTHORIZED          = "UNAUTHORIZED"
    TOKEN_EXPIRED         = "TOKEN_EXPIRED"
    INVALID_CREDENTIALS   = "INVALID_CREDENTIALS"
    FORBIDDEN             = "FORBIDDEN"
    NOT_FOUND             = "NOT_FOUND"
    DUPLICATE_ENTRY       = "DUPLICATE_ENTRY"
    DUPLICATE_EMAIL       = "DUPLICATE_EMAIL"
    DUPLICATE_USERNAME    = "DUPLICATE_USERNAME"
    OTP_INVALID           = "OTP_INVALID"
    NOTIFICATION_FAILED   = "NOTIFICATION_FAILED"
    INVALID_FILE          = "INVALID_FILE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


# ═══════════════════════════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════════════════════════
class AppException(HTTPException):
    """
    Base exception for all application-level errors.
    Carries a machine-readable error_code for frontend handling.
    """
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: list | None = None,
        field: str | None = None,
    ):
        self.message = message
        self.error_code = error_code
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            }
        })


# ═══════════════════════════════════════════════════════════════════════════════
# CONCRETE EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class ValidationException(AppException):
    """Input violations collected by the explicit validators in ceresense.schemas."""
    def __init__(self, details: list[dict]):
        self.details = details
        super().__init__(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error. Please check your input.",
            ErrorCode.VALIDATION_ERROR,
            details=details,
        )


class UnauthorizedException(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message, ErrorCode.UNAUTHORIZED)


class TokenExpiredException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "Access token has expired", ErrorCode.TOKEN_EXPIRED)


class InvalidCredentialsException(AppException):
    # Same text for "no such user" and "wrong password"
    def __init__(self):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "Invalid credentials", ErrorCode.INVALID_CREDENTIALS)


class ForbiddenException(AppException):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(status.HTTP_403_FORBIDDEN, message, ErrorCode.FORBIDDEN)


class NotFoundException(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)


class DuplicateEmailException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_409_CONFLICT, "Email already exists",
                         ErrorCode.DUPLICATE_EMAIL, field="email")


class DuplicateUsernameException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_409_CONFLICT, "Username already exists",
                         ErrorCode.DUPLICATE_USERNAME, field="username")


class InvalidOTPException(AppException):
    # Wrong code, expired code and unknown email all look the same
    def __init__(self):
        super().__init__(status.HTTP_400_BAD_REQUEST, "Invalid or expired OTP code", ErrorCode.OTP_INVALID)


class NotificationException(AppException):
    def __init__(self, message: str = "Failed to send email. Please try again later."):
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, message, ErrorCode.NOTIFICATION_FAILED)


class InvalidFileException(AppException):
    def __init__(self, message: str = "Invalid file"):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, ErrorCode.INVALID_FILE, field="image")
