"""Database session management."""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from src.config import DATABASE_URL, POSTGRES_HOST, POSTGRES_PORT, POSTGRES_DB
from src.utils.logging import log, get_logger

MODULE = "db"
logger = get_logger()

# Async engine (API routes, key lookups). No connection is opened until first use.
engine = create_async_engine(DATABASE_URL, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

log.debug(logger, MODULE, "configured", "Database engine configured",
          host=POSTGRES_HOST, port=POSTGRES_PORT, database=POSTGRES_DB)


async def get_session() -> AsyncSession:
    """Get an async database session."""
    async with async_session() as session:
        yield session
