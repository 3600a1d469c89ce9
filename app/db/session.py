"""
Database session and engine configuration.

This file sets up the async database connection using SQLAlchemy + asyncpg.
A single engine (and therefore a single connection pool) is shared by the
control plane and by every tenant namespace.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from app.core.config import settings


def build_engine(database_url: str | None = None, **overrides) -> AsyncEngine:
    """
    Create an async engine with a bounded statement timeout.

    `statement_timeout` is applied server-side to every connection the pool
    opens, and asyncpg's `command_timeout` bounds the client-side wait. Both
    are the same for every tenant, so they are not tenant state.
    """
    timeout_ms = settings.STATEMENT_TIMEOUT_MS
    options = dict(
        echo=settings.DEBUG,  # When DEBUG=True, prints SQL queries to console
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        connect_args={
            "server_settings": {"statement_timeout": str(timeout_ms)},
            # asyncpg takes seconds; give the server a chance to cancel first
            "command_timeout": timeout_ms / 1000 + 5,
        },
    )
    options.update(overrides)
    return create_async_engine(database_url or settings.DATABASE_URL, **options)


# Create the async database engine
engine = build_engine()

# Create a session factory
# Sessions are used to interact with the control-plane tables
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Keeps data accessible after commit
)

# Alias for dependencies
AsyncSessionLocal = async_session_maker
