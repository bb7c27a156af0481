import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from lumina.core.config import settings
from lumina.core.database import close_db, init_db
from lumina.core.logging_config import setup_logging
from lumina.services.verification_codes import VerificationCodeService, get_code_service

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "purge_expired_codes"


async def purge_expired_codes(service: VerificationCodeService = None) -> int:
    """Drop codes whose expiry has passed. Validation ignores them anyway; this only bounds growth."""
    service = service or get_code_service()
    return await service.purge_expired()


def build_scheduler(service: VerificationCodeService = None, interval_minutes: int = None) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        purge_expired_codes,
        "interval",
        minutes=interval_minutes or settings.CODE_SWEEP_INTERVAL_MINUTES,
        id=SWEEP_JOB_ID,
        kwargs={"service": service},
        coalesce=True,
        max_instances=1,
    )
    return scheduler


async def main():
    setup_logging()
    logger.info("Connecting to DB...")
    await init_db()

    # One sweep right away, then on the interval
    await purge_expired_codes()

    scheduler = build_scheduler()
    scheduler.start()
    logger.info("Expired code sweep scheduled every %d minutes", settings.CODE_SWEEP_INTERVAL_MINUTES)

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
