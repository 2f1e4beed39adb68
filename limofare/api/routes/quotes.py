"""
Quote endpoint
==============

POST /api/v1/quotes -- price a booking against the current rule set

Quotes are recomputed from scratch on every call and never stored; the
booking flow persists the final total itself when the booking is created.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from limofare.api.dependencies import get_pricing_document
from limofare.api.middleware import limiter
from limofare.api.schemas import QuoteRequest, QuoteResponse
from limofare.config import settings
from limofare.domain.pricing import compute_fare
from limofare.infrastructure.documents import PricingSettingsDocument

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post(
    "",
    response_model=QuoteResponse,
    summary="Compute a fare breakdown",
)
@limiter.limit(settings.rate_limit)
async def create_quote(
    request: Request,
    body: QuoteRequest,
    document: PricingSettingsDocument = Depends(get_pricing_document),
):
    breakdown = compute_fare(
        body.to_booking(), document.to_domain(), body.to_gratuity()
    )
    return QuoteResponse.from_breakdown(breakdown)
