"""
Pricing settings endpoints
==========================

GET /api/v1/settings/public  -- rule set used by the booking flow
GET /api/v1/admin/settings   -- same document, for the admin screen
PUT /api/v1/admin/settings   -- partial update, validated before saving
GET /api/v1/admin/health     -- simple health check
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from limofare.api.dependencies import get_db, get_pricing_document
from limofare.api.middleware import limiter
from limofare.api.schemas import HealthResponse
from limofare.config import settings
from limofare.domain.entities import InvalidPricingSettings
from limofare.domain.validation import validate_pricing_settings
from limofare.infrastructure.documents import PricingSettingsDocument
from limofare.infrastructure.repositories import PricingSettingsRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["settings"])


@router.get(
    "/settings/public",
    response_model=PricingSettingsDocument,
    summary="Pricing rule set for the booking flow",
)
@limiter.limit(settings.rate_limit)
async def get_public_settings(
    request: Request,
    document: PricingSettingsDocument = Depends(get_pricing_document),
):
    return document


@router.get(
    "/admin/settings",
    response_model=PricingSettingsDocument,
    summary="Current pricing rule set",
)
@limiter.limit(settings.rate_limit)
async def get_admin_settings(
    request: Request,
    document: PricingSettingsDocument = Depends(get_pricing_document),
):
    return document


@router.put(
    "/admin/settings",
    response_model=PricingSettingsDocument,
    summary="Update the pricing rule set",
    description=(
        "Only fields present in the body are replaced.  The merged rule set "
        "must have a non-overlapping tier ladder, valid HH:MM surcharge "
        "windows and parseable fee-rule conditions, otherwise 422."
    ),
    responses={422: {"description": "Rule set rejected"}},
)
@limiter.limit(settings.rate_limit)
async def update_settings(
    request: Request,
    body: PricingSettingsDocument,
    current: PricingSettingsDocument = Depends(get_pricing_document),
    db: AsyncSession = Depends(get_db),
):
    merged = current.merged_with(body)
    try:
        validate_pricing_settings(merged.to_domain())
    except InvalidPricingSettings as exc:
        logger.info("Rejected pricing settings update: %s", exc)
        raise HTTPException(status_code=422, detail=exc.errors)

    await PricingSettingsRepository(db).save_document(merged.to_wire())
    return merged


@router.get("/admin/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
