"""Super Mall console -- FastAPI application entry point.

The application hosts a single console session. Each route performs one
user action on the session (sign in, navigate, submit a form, delete,
compare) and returns the re-rendered markup.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mallconsole.api.v1.router import api_v1_router
from mallconsole.config import settings
from mallconsole.console import MallConsole, QueuedNotifier
from mallconsole.db.session import async_session_factory
from mallconsole.identity.provider import IdentityProvider
from mallconsole.models import Base
from mallconsole.services.identity_gateway import IdentityGateway
from mallconsole.services.offer_service import OfferService
from mallconsole.services.product_service import ProductService
from mallconsole.services.shop_service import ShopService
from mallconsole.state.context import ResourceServices
from mallconsole.store.document_store import DocumentStore

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%H:%M:%S"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(logging.INFO if settings.DEBUG else logging.WARNING),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
)
logger = logging.getLogger(__name__)


def build_console(session_factory: async_sessionmaker[AsyncSession] = async_session_factory) -> MallConsole:
    """Wire a console session to the document store and identity provider."""
    store = DocumentStore(session_factory)
    provider = IdentityProvider(
        session_factory,
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
        min_password_length=settings.MIN_PASSWORD_LENGTH,
    )
    services = ResourceServices(
        shops=ShopService(store),
        products=ProductService(store),
        offers=OfferService(store),
    )
    return MallConsole(IdentityGateway(provider, store), services, QueuedNotifier())


async def create_tables(db_engine: AsyncEngine) -> None:
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def create_app(console: Optional[MallConsole] = None) -> FastAPI:
    """Build the FastAPI application around one console session."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown events."""
        logger.info("Starting Super Mall console...")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug mode: {settings.DEBUG}")

        db_engine = app.state.console.services.shops.store.engine
        await create_tables(db_engine)
        logger.info("Database tables verified/created")

        yield

        logger.info("Shutting down Super Mall console...")
        await db_engine.dispose()

    app = FastAPI(
        title="Super Mall Console API",
        description="Administrative console for a shopping-mall directory",
        version="0.1.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.console = console or build_console()

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API v1 router
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Super Mall Console API",
            "version": "0.1.0",
            "docs": "/docs" if settings.DEBUG else None,
            "health": "/api/v1/health",
        }

    return app


app = create_app()
