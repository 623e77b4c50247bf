import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError

from ceresense.config import settings
from ceresense.database import check_db_connection, create_tables
from ceresense.dependencies import get_file_storage
from ceresense.utils.exceptions import AppException
from ceresense.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    generic_exception_handler,
)

from ceresense.api.v1 import auth
from ceresense.api.v1 import users
from ceresense.api.v1 import blog
from ceresense.api.v1 import gallery

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        description="Content management API: authentication, media gallery and blog",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ─── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
    )

    # ─── Exception Handlers ───────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ─── Routers ──────────────────────────────────────────────────────────────
    PREFIX = settings.API_PREFIX
    app.include_router(auth.router,    prefix=PREFIX, tags=["Auth"])
    app.include_router(users.router,   prefix=PREFIX, tags=["Users"])
    app.include_router(blog.router,    prefix=PREFIX, tags=["Blog"])
    app.include_router(gallery.router, prefix=PREFIX, tags=["Gallery"])

    # ─── Uploaded files ───────────────────────────────────────────────────────
    # FileStorage creates UPLOAD_DIR and its subfolders before the mount serves it
    storage = get_file_storage()
    app.mount("/uploads", StaticFiles(directory=storage.base_dir), name="uploads")

    # ─── Startup ──────────────────────────────────────────────────────────────
    @app.on_event("startup")
    def on_startup():
        ok = check_db_connection()
        logger.info("✅ DB connected" if ok else "❌ DB connection FAILED")
        if ok and settings.DATABASE_AUTO_CREATE and not settings.is_production:
            create_tables()
            logger.info("Database tables ensured")

    # ─── Root / Health ────────────────────────────────────────────────────────
    @app.get("/", tags=["Health"])
    def root():
        return {
            "message": f"✅ {settings.APP_NAME} is LIVE!",
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "auth": {
                    "register":       f"POST {PREFIX}/auth/register",
                    "login":          f"POST {PREFIX}/auth/login",
                    "forgotPassword": f"POST {PREFIX}/auth/forgot-password",
                    "resetPassword":  f"POST {PREFIX}/auth/reset-password",
                }
            },
            "note": "Use POST requests with JSON body for auth endpoints",
        }

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": VERSION}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ceresense.main:app", host=settings.APP_HOST, port=settings.APP_PORT,
                reload=settings.is_development)
