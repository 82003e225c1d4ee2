from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from src.api.core.exceptions.base import (
    ConcurrentModificationError,
    PersistenceError,
)
from src.utils.logger import get_logger


class BaseService:
    """Base service class holding the session factory.

    Each operation opens its own session so a service instance can be shared
    by concurrent requests.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self.logger = get_logger(self.__class__.__name__)

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Open a session and translate storage failures into service errors."""
        async with self.session_factory() as session:
            try:
                yield session
            except StaleDataError as e:
                await session.rollback()
                self.logger.warning("Optimistic lock lost", error=str(e))
                raise ConcurrentModificationError(
                    details={"description": "Row version changed during update"}
                ) from e
            except SQLAlchemyError as e:
                await session.rollback()
                self.logger.error(
                    "Storage operation failed",
                    error=str(e),
                    exception_type=type(e).__name__,
                )
                raise PersistenceError(
                    details={"exception_type": type(e).__name__}
                ) from e
