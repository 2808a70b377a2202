"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agenpay.config import get_settings
from agenpay.ledger.database import close_db, init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    from agenpay.api.routes.dex import close_dex_service

    await init_db()
    yield
    await close_dex_service()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="AgenPay API",
        description="Multi-token payment routing with DEX aggregator quotes",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from agenpay.api.routes import dex, health

    app.include_router(health.router, tags=["Health"])
    app.include_router(dex.router)

    return app
