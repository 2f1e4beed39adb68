"""
Seed script -- stores a starter pricing rule set.

Run after migrations:
    python seed.py

Creates (only if no document is stored yet):
  - the default three-tier distance ladder (0-40: $0, 40-60: $49, 60-100: $99)
  - an evening rush-hour surcharge (17:00-19:00, $20)
  - a sample fee rule for large child-seat requests
"""

import asyncio

from limofare.domain.validation import validate_pricing_settings
from limofare.infrastructure.database import async_session_factory, engine
from limofare.infrastructure.documents import (
    FeeRuleSchema,
    PricingSettingsDocument,
    TimeSurchargeSchema,
)
from limofare.infrastructure.repositories import PricingSettingsRepository

STARTER_SETTINGS = PricingSettingsDocument(
    time_surcharges=[
        TimeSurchargeSchema(start_time="17:00", end_time="19:00", surcharge=20),
    ],
    fee_rules=[
        FeeRuleSchema(
            condition="bookingDetails.carSeats + bookingDetails.boosterSeats > 3",
            fee=25,
        ),
    ],
)


async def seed():
    async with async_session_factory() as session:
        repo = PricingSettingsRepository(session)

        # Check if already seeded
        if await repo.get_document() is not None:
            print("Pricing settings already stored. Skipping.")
            return

        validate_pricing_settings(STARTER_SETTINGS.to_domain())
        await repo.save_document(STARTER_SETTINGS.to_wire())
        await session.commit()

        doc = STARTER_SETTINGS
        print(f"  Stored {len(doc.distance_tiers)} distance tiers")
        print(f"  Stored {len(doc.time_surcharges)} time surcharges")
        print(f"  Stored {len(doc.fee_rules)} fee rules")
        print("\nSeed complete!")


async def main():
    print("Seeding pricing settings...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
