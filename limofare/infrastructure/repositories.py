"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import PRICING_SETTINGS_KEY, PricingSettingsModel

logger = logging.getLogger(__name__)


class PricingSettingsRepository:
    def __init__(self, session: AsyncSession, key: str = PRICING_SETTINGS_KEY):
        self.session = session
        self.key = key

    async def get_row(self) -> Optional[PricingSettingsModel]:
        result = await self.session.execute(
            select(PricingSettingsModel).where(PricingSettingsModel.key == self.key)
        )
        return result.scalar_one_or_none()

    async def get_document(self) -> Optional[dict[str, Any]]:
        """Return the stored camelCase document, or ``None`` if never saved."""
        row = await self.get_row()
        return dict(row.document) if row else None

    async def save_document(self, document: dict[str, Any]) -> PricingSettingsModel:
        """Insert or replace the whole document."""
        row = await self.get_row()
        if row is None:
            row = PricingSettingsModel(key=self.key, document=document)
            self.session.add(row)
        else:
            row.document = document
        await self.session.flush()
        logger.info("Pricing settings %r saved", self.key)
        return row
