"""Helpers shared by the test modules: in-memory database, fakes, app wiring."""
import tempfile
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import ceresense.models  # noqa: F401  registers models on Base.metadata
from ceresense.database import Base, get_db
from ceresense.dependencies import (
    get_file_storage, get_notifier, get_otp_generator, get_password_hasher,
)
from ceresense.main import app
from ceresense.models.user import UserRole
from ceresense.repositories.user_repository import UserRepository
from ceresense.utils.security import OtpGenerator, PasswordHasher, utcnow
from ceresense.utils.storage import FileStorage

# Lowest bcrypt cost; keeps the suite fast
fast_hasher = PasswordHasher(rounds=4)


def make_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


class RecordingNotifier:
    """Stands in for EmailNotifier; keeps every message, optionally failing."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def send(self, to_email: str, subject: str, html: str) -> bool:
        self.sent.append({"to": to_email, "subject": subject, "html": html})
        return not self.fail


class FixedOtpGenerator(OtpGenerator):
    """Hands out the queued codes first, then falls back to random ones."""

    def __init__(self, *codes: str):
        super().__init__(length=6, expire_minutes=10)
        self.codes = list(codes)
        self.issued: list[str] = []

    def generate(self) -> str:
        code = self.codes.pop(0) if self.codes else super().generate()
        self.issued.append(code)
        return code


class Clock:
    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ApiHarness:
    """TestClient over a fresh in-memory database with fake collaborators."""

    def __init__(self):
        self.SessionLocal = make_session_factory()
        self.notifier = RecordingNotifier()
        self.otps = FixedOtpGenerator()
        self.upload_dir = tempfile.TemporaryDirectory()
        self.storage = FileStorage(base_dir=self.upload_dir.name)

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_password_hasher] = lambda: fast_hasher
        app.dependency_overrides[get_notifier] = lambda: self.notifier
        app.dependency_overrides[get_otp_generator] = lambda: self.otps
        app.dependency_overrides[get_file_storage] = lambda: self.storage
        self.client = TestClient(app, raise_server_exceptions=False)

    def close(self) -> None:
        app.dependency_overrides.clear()
        self.upload_dir.cleanup()

    # ─── Shortcuts ────────────────────────────────────────────────────────────
    def register(self, username: str, password: str = "Passw0rd!", **extra) -> dict:
        body = {
            "fullName": extra.get("fullName", username.title()),
            "username": username,
            "email": extra.get("email", f"{username}@x.com"),
            "password": password,
            "confirmPassword": password,
        }
        resp = self.client.post("/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    def register_with_role(self, username: str, role: UserRole) -> dict:
        data = self.register(username)
        db = self.SessionLocal()
        try:
            repo = UserRepository(db)
            repo.update_role(repo.find_by_id(data["user"]["id"]), role)
        finally:
            db.close()
        return data

    @staticmethod
    def auth_header(session: dict) -> dict:
        return {"Authorization": f"Bearer {session['accessToken']}"}
