import enum
import uuid

from sqlalchemy import Column, String, Enum, TIMESTAMP, CheckConstraint
from sqlalchemy.sql import func
from ceresense.database import Base


class UserRole(str, enum.Enum):
    ADMIN  = "admin"
    EDITOR = "editor"
    USER   = "user"


class User(Base):
    __tablename__ = "users"

    id         = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    fullName   = Column(String(150), nullable=False)
    username   = Column(String(100), unique=True, nullable=False, index=True)
    email      = Column(String(255), unique=True, nullable=False, index=True)
    password   = Column(String(255), nullable=False)
    role       = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
    otpCode    = Column(String(10), nullable=True)
    otpExpires = Column(TIMESTAMP(timezone=True), nullable=True)
    createdAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                        onupdate=func.now(), nullable=False)

    __table_args__ = (
        # otpCode and otpExpires are written and cleared as a pair
        CheckConstraint(
            '("otpCode" IS NULL AND "otpExpires" IS NULL) OR '
            '("otpCode" IS NOT NULL AND "otpExpires" IS NOT NULL)',
            name="chk_otp_pair",
        ),
    )

    def __repr__(self):
        return f"<User id={self.id} username={self.username} role={self.role}>"
