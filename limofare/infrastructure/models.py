"""
SQLAlchemy ORM models.

Tables
------
* ``pricing_settings`` -- the admin-edited pricing document, stored as one
  JSON row per key (the booking flow only ever uses ``"pricing"``).

The document is kept in its camelCase wire form so a settings row written
by an older release still loads: missing fields take their defaults when
the row is parsed.
"""

from sqlalchemy import JSON, Column, DateTime, Integer, String, func

from .database import Base

PRICING_SETTINGS_KEY = "pricing"


class PricingSettingsModel(Base):
    __tablename__ = "pricing_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(64), unique=True, nullable=False, default=PRICING_SETTINGS_KEY)
    document = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
