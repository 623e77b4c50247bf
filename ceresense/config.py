from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # ─── Application ───────────────────────────────────────────────────────────
    APP_NAME:   str  = "CERESENSE Backend"
    APP_ENV:    str  = "development"
    APP_DEBUG:  bool = True
    APP_HOST:   str  = "0.0.0.0"
    APP_PORT:   int  = 4000
    API_PREFIX: str  = ""

    # ─── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL:          str  = "sqlite:///./ceresense.db"
    DATABASE_POOL_SIZE:    int  = 10
    DATABASE_MAX_OVERFLOW: int  = 20
    DATABASE_POOL_TIMEOUT: int  = 30
    DATABASE_ECHO:         bool = False
    DATABASE_AUTO_CREATE:  bool = True   # create missing tables on startup (ignored in production)

    # ─── JWT / Hashing ─────────────────────────────────────────────────────────
    SECRET_KEY:                  str = "change-me-in-production"
    ALGORITHM:                   str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS:               int = 10

    # ─── OTP ───────────────────────────────────────────────────────────────────
    OTP_EXPIRE_MINUTES: int = 10
    OTP_LENGTH:         int = 6

    # ─── Mail ──────────────────────────────────────────────────────────────────
    MAIL_ENABLED:  bool = False   # False: messages are written to the log instead
    MAIL_HOST:     str  = ""
    MAIL_PORT:     int  = 587
    MAIL_USERNAME: str  = ""
    MAIL_PASSWORD: str  = ""
    MAIL_FROM:     str  = "Ceresense <no-reply@ceresense.local>"
    MAIL_USE_TLS:  bool = True
    MAIL_USE_SSL:  bool = False
    MAIL_TIMEOUT:  int  = 10

    # ─── Uploads ───────────────────────────────────────────────────────────────
    UPLOAD_DIR:      str = "uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024

    # ─── CORS ──────────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:5174"

    def get_cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


settings = Settings()
