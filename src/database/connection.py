from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.database.models import Base
from src.utils.logger import get_logger
from src.utils.settings.database import DatabaseSettings

logger = get_logger(__name__)


def create_engine_from_settings(settings: DatabaseSettings) -> AsyncEngine:
    """Build the async engine for the configured database URL."""
    url = settings.DATABASE_URL_ASYNC
    kwargs: dict = {"echo": False}
    if not url.startswith("sqlite"):
        kwargs.update(pool_pre_ping=True, pool_recycle=300)
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")
