"""Initialise the database schema and seed the default application.

Run once to create all tables and an API key for the "organizer" app:
    python -m scripts.init_db
"""

import asyncio

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.config import DATABASE_URL
from src.db.models import ApiKey, Application, Base

logger = structlog.get_logger()

DEFAULT_APPLICATION = "organizer"


async def init() -> None:
    logger.info("init_db", url=DATABASE_URL.split("@")[-1])  # log host only

    engine = create_async_engine(DATABASE_URL, echo=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        result = await session.execute(
            select(Application).where(Application.name == DEFAULT_APPLICATION)
        )
        if result.scalar_one_or_none() is None:
            application = Application(name=DEFAULT_APPLICATION)
            api_key = ApiKey(application=application)
            session.add_all([application, api_key])
            await session.commit()
            logger.info("init_db.seeded", application=DEFAULT_APPLICATION, api_key=str(api_key.id))
        else:
            logger.info("init_db.seed_skipped", application=DEFAULT_APPLICATION)

    await engine.dispose()
    logger.info("init_db.done")


if __name__ == "__main__":
    asyncio.run(init())
