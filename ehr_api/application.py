# ehr_api/application.py
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import appointments, auth, lab_results, users
from .config import Settings
from .database import Store
from .errors import register_error_handlers
from .logging_setup import setup_logging
from .passwords import PasswordHasher
from .tokens import TokenService
from .uploads import PhotoStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. Raises ``ConfigError`` when required settings are missing."""
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: open the pool and make sure the tables exist
        store = Store(settings)
        store.create_all()
        app.state.store = store
        logger.info("Store ready (%s, pool size %d)", store.backend, settings.db_pool_size)
        try:
            yield
        finally:
            # Shutdown
            store.dispose()

    app = FastAPI(title="EHR API", version="1.0.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.tokens = TokenService(
        settings.jwt_secret,
        previous_secrets=settings.jwt_previous_secrets,
        ttl=timedelta(hours=settings.jwt_expire_hours),
    )
    app.state.hasher = PasswordHasher(settings.bcrypt_rounds)
    app.state.photos = PhotoStore(settings.upload_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(appointments.router)
    app.include_router(lab_results.router)
    app.include_router(users.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
