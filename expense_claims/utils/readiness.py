"""Startup gate that waits for the database to accept connections."""
import asyncio

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from expense_claims.exceptions import StorageUnavailableException
from expense_claims.utils.logging_config import get_logger

logger = get_logger(__name__)


async def ping_database(engine: AsyncEngine) -> None:
    """Run a trivial query; raises if the database cannot answer."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_database(engine: AsyncEngine, max_attempts: int, interval: float) -> int:
    """
    Block until the database answers a liveness probe.

    Args:
        engine: Engine to probe
        max_attempts: Consecutive failures tolerated before giving up
        interval: Seconds to wait between attempts

    Returns:
        Number of the attempt that succeeded

    Raises:
        StorageUnavailableException: If every attempt failed
    """
    last_error = None
    for attempt in range(1, max_attempts + 1):
        try:
            await ping_database(engine)
            logger.info(f"Database ready after {attempt} attempt(s)")
            return attempt
        except (SQLAlchemyError, OSError) as e:
            last_error = e
            logger.warning(
                f"Database not ready (attempt {attempt}/{max_attempts}): {str(e)}",
                extra={"extra_fields": {"attempt": attempt, "max_attempts": max_attempts}}
            )
            if attempt < max_attempts:
                await asyncio.sleep(interval)

    logger.critical(f"Database unavailable after {max_attempts} attempt(s); giving up")
    raise StorageUnavailableException(
        attempts=max_attempts,
        details={"last_error": str(last_error)},
    )
