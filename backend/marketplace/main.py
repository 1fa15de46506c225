import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from marketplace.config import LOG_LEVEL, parse_csv_env
from marketplace.dependencies import Marketplace, build_marketplace, get_session
from marketplace.logging_config import setup_logging
from marketplace.routers import auth, catalog, dashboard, provider_dashboard
from marketplace.session import SessionContext

logger = logging.getLogger(__name__)


def create_app(marketplace: Optional[Marketplace] = None) -> FastAPI:
    setup_logging(LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        current = marketplace or build_marketplace()
        app.state.marketplace = current
        logger.info("Marketplace store opened at %s", current.backend.config.db_path)
        yield
        app.state.marketplace = None

    app = FastAPI(title="Local Services Marketplace", version="0.1.0", lifespan=lifespan)

    cors_origins = parse_csv_env("CORS_ORIGINS", "*")
    allow_any_origin = len(cors_origins) == 1 and cors_origins[0] == "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        # Browsers reject wildcard CORS with credentials enabled.
        allow_credentials=not allow_any_origin,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    trusted_hosts = parse_csv_env("TRUSTED_HOSTS", "*")
    if not (len(trusted_hosts) == 1 and trusted_hosts[0] == "*"):
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)

    app.include_router(auth.router)
    app.include_router(catalog.router)
    app.include_router(dashboard.router)
    app.include_router(provider_dashboard.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/ready")
    def ready(session: SessionContext = Depends(get_session)):
        return {
            "status": "loading" if session.loading else "ready",
            "signed_in": session.is_authenticated,
        }

    return app


app = create_app()
