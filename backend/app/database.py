from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from app.config import get_settings
from app.exceptions import ArborException, TransactionError
from app.logging_config import get_logger

logger = get_logger(__name__)

settings = get_settings()

IS_SQLITE = settings.database_url.startswith("sqlite")

if IS_SQLITE:
    # SQLite: a single shared connection
    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=1800,  # Recycle connections after 30 min
        pool_pre_ping=True,  # Verify connection health before use
    )

# Session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Verify the connection and create missing tables."""
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def atomic(session: AsyncSession, operation: str) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a multi-step mutation as one all-or-nothing transaction.

    Commits on success. Domain errors roll back and propagate unchanged;
    store faults roll back and surface as TransactionError.
    """
    try:
        yield session
        await session.commit()
    except ArborException:
        await session.rollback()
        raise
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(f"Transaction failed during '{operation}': {exc}", exc_info=True)
        raise TransactionError(operation, str(exc)) from exc
