from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ceresense.models.user import User, UserRole
from ceresense.utils.exceptions import DuplicateEmailException, DuplicateUsernameException
from ceresense.utils.security import utcnow


class UserRepository:
    """
    Credential store: the lookups and writes the auth flows need, nothing more.

    Writes commit immediately so that a credential change is durable before
    any notification about it goes out.
    """

    def __init__(self, db: Session):
        self.db = db

    # ─── Lookups ──────────────────────────────────────────────────────────────
    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def find_by_id(self, user_id: str) -> User | None:
        return self.db.query(User).filter(User.id == str(user_id)).first()

    def find_by_otp_code(self, email: str, otp_code: str, now: datetime | None = None) -> User | None:
        """Match only while the code is unexpired."""
        return self.db.query(User).filter(
            User.email == email,
            User.otpCode == otp_code,
            User.otpExpires > (now or utcnow()),
        ).first()

    # ─── Writes ───────────────────────────────────────────────────────────────
    def create(
        self,
        full_name: str,
        username: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(
            fullName=full_name,
            username=username,
            email=email,
            password=password_hash,
            role=role,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration; the UNIQUE constraint decides
            self.db.rollback()
            if self.find_by_email(email):
                raise DuplicateEmailException()
            if self.find_by_username(username):
                raise DuplicateUsernameException()
            raise
        self.db.refresh(user)
        return user

    def update_password(self, user_id: str, password_hash: str) -> None:
        """Write the new hash and clear the OTP pair in one UPDATE."""
        self.db.query(User).filter(User.id == str(user_id)).update(
            {"password": password_hash, "otpCode": None, "otpExpires": None},
            synchronize_session="fetch",
        )
        self.db.commit()

    def set_otp_code(self, email: str, otp_code: str, otp_expires: datetime) -> None:
        """Overwrites any previous code; only the newest one is valid."""
        self.db.query(User).filter(User.email == email).update(
            {"otpCode": otp_code, "otpExpires": otp_expires},
            synchronize_session="fetch",
        )
        self.db.commit()

    # ─── Account management ───────────────────────────────────────────────────
    def list_users(
        self, page: int, limit: int, search: str | None = None, role: UserRole | None = None,
    ) -> tuple[list[User], int]:
        q = self.db.query(User)
        if search:
            kw = f"%{search}%"
            q = q.filter(or_(
                User.fullName.ilike(kw),
                User.username.ilike(kw),
                User.email.ilike(kw),
            ))
        if role is not None:
            q = q.filter(User.role == role)

        total = q.count()
        users = q.order_by(User.createdAt.desc()).offset((page - 1) * limit).limit(limit).all()
        return users, total

    def update_role(self, user: User, role: UserRole) -> User:
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        return user
