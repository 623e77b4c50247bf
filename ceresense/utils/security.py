import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext

from ceresense.config import settings
from ceresense.utils.exceptions import TokenExpiredException, UnauthorizedException


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─── Password Hashing ─────────────────────────────────────────────────────────
class PasswordHasher:
    """bcrypt via passlib; ``rounds`` is the bcrypt cost factor."""

    def __init__(self, rounds: int = settings.BCRYPT_ROUNDS):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password using bcrypt."""
        return self.context.hash(plain_password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a plain-text password against a bcrypt hash."""
        try:
            return self.context.verify(plain_password, hashed_password)
        except ValueError:
            # unparseable digest in the store
            return False


# ─── JWT ──────────────────────────────────────────────────────────────────────
class TokenIssuer:
    def __init__(
        self,
        secret_key: str = settings.SECRET_KEY,
        algorithm: str = settings.ALGORITHM,
        expire_minutes: int = settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def sign(self, claims: dict) -> str:
        """
        Create a JWT access token.
        Payload: sub, username, role (from ``claims``) plus type and exp.
        """
        payload = dict(claims)
        payload["sub"] = str(payload["sub"])
        payload["type"] = "access"
        payload["exp"] = utcnow() + timedelta(minutes=self.expire_minutes)
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        """
        Decode and validate a JWT access token.
        Raises 401 if invalid, 401 (TOKEN_EXPIRED) if expired.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredException()
        except JWTError:
            raise UnauthorizedException("Invalid or malformed token")
        if payload.get("type") != "access":
            raise UnauthorizedException("Invalid token type")
        return payload


# ─── OTP ──────────────────────────────────────────────────────────────────────
class OtpGenerator:
    def __init__(
        self,
        length: int = settings.OTP_LENGTH,
        expire_minutes: int = settings.OTP_EXPIRE_MINUTES,
    ):
        self.length = length
        self.expire_minutes = expire_minutes

    def generate(self) -> str:
        """Numeric code drawn uniformly from [10**(length-1), 10**length - 1]."""
        low = 10 ** (self.length - 1)
        return str(low + secrets.randbelow(9 * low))

    def expiry(self, now: datetime | None = None) -> datetime:
        """Return OTP expiry timestamp (UTC)."""
        return (now or utcnow()) + timedelta(minutes=self.expire_minutes)


password_hasher = PasswordHasher()
token_issuer = TokenIssuer()
otp_generator = OtpGenerator()
