"""Database engine and sessions for the cards store."""
# Standard library imports
import logging
from typing import AsyncGenerator

# Third-party imports
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

# Local imports
from config import settings
from exceptions import HolidayCardError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for occasions and cards."""
    pass


def get_database_url() -> URL:
    """mysql+aiomysql URL from DB_HOST ("host" or "host:port") and credentials"""
    host, _, port = settings.DB_HOST.partition(':')

    return URL.create(
        "mysql+aiomysql",
        username=settings.DB_USER,
        password=settings.DB_PASSWORD or None,
        host=host,
        port=int(port) if port else 3306,
        database=settings.DB_NAME,
        query={"charset": "utf8mb4"},
    )


DATABASE_URL = get_database_url()
logger.info(f"Database URL: {DATABASE_URL.render_as_string(hide_password=True)}")

engine = create_async_engine(
    DATABASE_URL,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_CONNECTIONS - settings.DB_POOL_SIZE,
    pool_recycle=settings.DB_POOL_RECYCLE,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def init_db():
    """Create the occasions and cards tables"""
    # Register models on Base.metadata
    from storage import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session for Depends

    Commits when the request succeeds. Any exception rolls back; card errors
    are expected outcomes and are not logged here.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except HolidayCardError:
            await session.rollback()
            raise
        except Exception as e:
            logger.error(f"Database session error: {str(e)}")
            await session.rollback()
            raise


async def cleanup_db():
    """Dispose of the engine's connections"""
    await engine.dispose()
    logger.info("Database connections closed")
