"""Async database session and engine configuration."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from mallconsole.config import settings


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pool options suited to the dialect."""
    # SQLite doesn't support pool_size / max_overflow / pool_pre_ping
    engine_kwargs: dict = {"echo": echo}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(pool_size=20, max_overflow=10, pool_pre_ping=True)
    return create_async_engine(database_url, **engine_kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

async_session_factory = build_session_factory(engine)
