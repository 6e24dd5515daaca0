"""
Shared plumbing for the arena services.

Services read the active cycle's data in short-lived sessions; a read that
hits a locked or briefly unavailable database is retried with backoff.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

RETRY_BASE_DELAY = 0.1


class BaseService:
    """Services share one Database and open their own sessions from it."""

    def __init__(self, database):
        self.db = database

    @property
    def session_factory(self):
        return self.db.session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that commits on success and rolls back on any error."""
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def execute_with_retry(self, func: Callable[[], Awaitable[Any]], max_retries: int = 3) -> Any:
        """
        Await ``func()``, retrying on OperationalError (locked database,
        dropped connection). Any other exception propagates on first failure.
        """
        for attempt in range(1, max_retries + 1):
            try:
                return await func()
            except OperationalError as e:
                if attempt == max_retries:
                    logger.error(f"{func.__name__} failed after {max_retries} attempts: {e}")
                    raise
                delay = RETRY_BASE_DELAY * 2 ** (attempt - 1)
                logger.warning(f"{func.__name__} hit a database error (attempt {attempt}), retrying in {delay}s: {e}")
                await asyncio.sleep(delay)
