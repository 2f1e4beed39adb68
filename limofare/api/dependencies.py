"""FastAPI dependency injection helpers."""

import logging

from fastapi import Depends
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from limofare.infrastructure.database import async_session_factory
from limofare.infrastructure.documents import PricingSettingsDocument
from limofare.infrastructure.repositories import PricingSettingsRepository

logger = logging.getLogger(__name__)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_pricing_document(
    db: AsyncSession = Depends(get_db),
) -> PricingSettingsDocument:
    """Current pricing document; defaults when none is stored or it is unreadable."""
    raw = await PricingSettingsRepository(db).get_document()
    if raw is None:
        return PricingSettingsDocument()
    try:
        return PricingSettingsDocument.model_validate(raw)
    except ValidationError:
        logger.exception("Stored pricing settings are invalid; serving defaults")
        return PricingSettingsDocument()
