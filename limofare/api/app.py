"""
FastAPI application factory.

* Registers the settings and quote routers.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from limofare.api.middleware import limiter
from limofare.api.routes import quotes, settings as settings_routes
from limofare.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Limousine Fare API",
        description=(
            "Prices limousine bookings from an admin-editable rule set: "
            "distance tiers, per-mile overage, time-of-day surcharges, "
            "add-on fees, conditional fee rules, min/max clamping and gratuity."
        ),
        version="1.0.0",
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(settings_routes.router, prefix="/api/v1")
    app.include_router(quotes.router, prefix="/api/v1")

    return app
