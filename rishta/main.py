"""
Rishta Matchmaking API
Registration, admin approval, package credits and privacy-redacted matches.
"""
from dotenv import load_dotenv
load_dotenv()

import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

from rishta.core.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True  # Override any existing configuration
)

logger = logging.getLogger(__name__)


def run_migrations() -> None:
    """Run Alembic migrations on startup. Uses alembic.ini and DATABASE_URL.
    Fails startup if migrations fail, so the DB is never left out of sync."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_ini = project_root / "alembic.ini"
    if not alembic_ini.exists():
        logger.warning("alembic.ini not found, skipping Alembic migrations")
        return
    try:
        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
        alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL.replace("%", "%%"))
        alembic_cfg.attributes["configure_logger"] = False
        command.upgrade(alembic_cfg, "head")
        logger.info("Alembic migrations completed successfully")
    except Exception as e:
        logger.exception("Alembic migration failed: %s", e)
        raise  # Fail startup so DB is not left out of sync; fix migration or env and redeploy


from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from rishta.api.routes import public, admin
from rishta.core.exceptions import RishtaError
from rishta.db.base import Base
from rishta.db.session import engine, SessionLocal
from rishta.services.accounts import ensure_admin_account
from rishta.services.storage import get_uploads_dir
from rishta.utils.disposable_email import ensure_blocklist_loaded
# Import all models to ensure they're registered with Base
from rishta.models import Account, Listing, ProfileUnlock  # noqa: F401

app = FastAPI(title="Rishta Matchmaking API")


@app.on_event("startup")
async def startup_event():
    """Create tables, run Alembic migrations, then bootstrap the configured admin."""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")
    except Exception:
        logger.exception("Error creating tables")
        raise

    run_migrations()

    n = ensure_blocklist_loaded()
    logger.info("Disposable email blocklist loaded: %s domains", n)

    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
        db = SessionLocal()
        try:
            ensure_admin_account(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
        finally:
            db.close()
    else:
        logger.info("ADMIN_EMAIL / ADMIN_PASSWORD not set; skipping admin bootstrap")


@app.exception_handler(RishtaError)
async def rishta_error_handler(request: Request, exc: RishtaError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    parts = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": False, "message": "; ".join(parts) or "Invalid request"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Storage/infra failures: log the detail, never return it
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# Register routers
app.include_router(public.router, tags=["Public"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


@app.get("/health")
def health():
    return {"success": True, "status": "ok"}


# Serve uploaded photos and payment screenshots at /uploads/...
app.mount("/uploads", StaticFiles(directory=str(get_uploads_dir())), name="uploads")
