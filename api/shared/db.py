"""Per-request database session dependency."""
import logging
from typing import AsyncIterator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from di.container import ApplicationContainer
from infra.resources import DatabaseResource

logger = logging.getLogger("rag.db")


@inject
async def get_db_session(
    db: DatabaseResource = Depends(
        Provide[ApplicationContainer.infrastructure.database]
    ),
) -> AsyncIterator[AsyncSession]:
    """One session per request; uncommitted work is discarded on close."""
    session = db.get_session()
    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception:
            logger.warning("Failed to close database session", exc_info=True)
