import asyncio
import logging
from datetime import datetime, timezone

from allocation.core.config import settings
from allocation.core.db import SessionLocal
from allocation.core.telemetry import setup_worker_telemetry
from allocation.services import listings as listing_service
from allocation.services import offers as offer_service


log = logging.getLogger(__name__)

POLL_SECONDS = 60


async def _tick(now: datetime | None = None) -> tuple[list[int], list[int]]:
    """One pass: expire overdue offers, then listings whose publish window closed."""
    now = now or datetime.now(timezone.utc)
    async with SessionLocal() as db:
        offer_listing_ids = await offer_service.expire_offers(db, now=now)
        expired_listing_ids = await listing_service.expire_listings(db, now=now)
        await db.commit()

    if offer_listing_ids or expired_listing_ids:
        log.info(
            "tick: offers expired on listings %s, listings expired %s",
            offer_listing_ids, expired_listing_ids,
        )
    return offer_listing_ids, expired_listing_ids


async def main():
    logging.basicConfig(level=settings.log_level)
    if settings.telemetry_enabled:
        setup_worker_telemetry("expiry")
    log.info("expiry: started")
    while True:
        try:
            await _tick()
        except Exception:
            log.exception("expiry: tick crashed")
        await asyncio.sleep(POLL_SECONDS)


if __name__ == "__main__":
    asyncio.run(main())
