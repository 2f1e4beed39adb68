"""
HTTP client for the public pricing-settings document.

One ``SettingsLoader`` belongs to one booking session: the document is
fetched on first use and reused for every recomputation afterwards.  Any
failure (network, non-2xx, bad JSON, invalid document) is logged and the
built-in defaults are used instead.  There is no retry.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from limofare.config import settings as app_settings
from limofare.domain.entities import PricingSettings
from limofare.infrastructure.documents import PricingSettingsDocument

logger = logging.getLogger(__name__)

PUBLIC_SETTINGS_PATH = "/settings/public"


class SettingsLoader:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = (base_url or app_settings.settings_api_url).rstrip("/")
        self._timeout = (
            timeout if timeout is not None else app_settings.settings_fetch_timeout_seconds
        )
        self._client = client
        self._cached: Optional[PricingSettings] = None

    @property
    def loaded(self) -> bool:
        return self._cached is not None

    async def load(self) -> PricingSettings:
        """Return the session's settings, fetching them on first call."""
        if self._cached is None:
            self._cached = await self._fetch()
        return self._cached

    def invalidate(self) -> None:
        """Drop the cached copy so the next ``load`` refetches."""
        self._cached = None

    async def _fetch(self) -> PricingSettings:
        try:
            if self._client is not None:
                resp = await self._client.get(self._base_url + PUBLIC_SETTINGS_PATH)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(self._base_url + PUBLIC_SETTINGS_PATH)
            resp.raise_for_status()
            data = resp.json()
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return PricingSettingsDocument.model_validate(data).to_domain()
        except (httpx.HTTPError, ValidationError, ValueError) as exc:
            logger.warning(
                "Could not load pricing settings from %s, using defaults: %s",
                self._base_url,
                exc,
            )
            return PricingSettings.defaults()
