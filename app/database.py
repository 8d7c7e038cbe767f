"""Database Connection and Session Management"""

import re
import ssl
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from typing import AsyncGenerator, AsyncIterator

from app.config import settings
from app.core.exceptions import ConflictError, StorageError
from app.core.logging import get_logger

logger = get_logger(__name__)

# Convert postgresql:// to postgresql+asyncpg:// for async support
database_url = settings.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

# asyncpg takes ssl=SSLContext, not sslmode; strip sslmode from the URL
connect_args = {}
if re.search(r"[?&]sslmode=(require|required|verify-full)", database_url, re.I):
    _ssl_ctx = ssl.create_default_context()
    _ssl_ctx.check_hostname = False
    _ssl_ctx.verify_mode = ssl.CERT_NONE
    connect_args["ssl"] = _ssl_ctx
    database_url = re.sub(r"[?&]sslmode=[^&]+", "", database_url, flags=re.I)
    database_url = re.sub(r"\?&", "?", database_url).rstrip("?")

# Create async engine with connection pooling
engine = create_async_engine(
    database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    echo=False,
    future=True,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get a request-scoped database session.

    Commits whatever the handler left pending on success and rolls back
    on any exception.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run the enclosed statements as one all-or-nothing unit.

    Commits on exit. Any failure rolls the whole unit back; SQLAlchemy
    errors are translated into ``ConflictError`` (unique/foreign-key
    violations) or ``StorageError`` so no driver detail leaks upward.

    Example:
        ```python
        async with atomic(db):
            assignment.title = "New title"
            await db.execute(delete(assignment_groups).where(...))
        ```
    """
    try:
        yield db
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Integrity violation, transaction rolled back", extra={"error": str(exc.orig)})
        raise ConflictError("The change conflicts with existing records") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Storage failure, transaction rolled back", exc_info=True)
        raise StorageError() from exc
    except Exception:
        await db.rollback()
        raise


async def init_db() -> None:
    """Initialize database tables (for development only)"""
    import app.models  # noqa: F401  (registers every table on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
