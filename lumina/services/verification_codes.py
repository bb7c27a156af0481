"""
Verification code lifecycle: issue, deliver, validate, purge.

A code is bound to (channel, identifier, purpose). Issuing replaces whatever
was stored under that key; validating finds and deletes the matching live
record in one store operation, so a code redeems at most once.
"""
import logging
import random
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Callable, Dict, Optional

from fastapi import BackgroundTasks

from lumina.core.config import settings
from lumina.core.exceptions import InvalidVerificationCode
from lumina.db.code_store import CodeKey, CodeRecord, CodeStore, build_code_store
from lumina.models.identifier import Identifier
from lumina.services.delivery import BaseCodeSender, DeliveryResult, build_senders
from lumina.utils.datetime import utcnow

logger = logging.getLogger(__name__)

CODE_RE = re.compile(r"\d{6}")

_rng = random.SystemRandom()


def generate_code() -> str:
    return str(_rng.randint(100000, 999999))


@dataclass(frozen=True)
class IssuedCode:
    code: str
    expires_at: datetime
    cooldown_seconds: int


class VerificationCodeService:
    def __init__(
        self,
        store: CodeStore,
        senders: Dict[str, BaseCodeSender],
        ttl: timedelta = timedelta(minutes=5),
        cooldown_seconds: int = 60,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[], str] = generate_code,
    ):
        self.store = store
        self.senders = senders
        self.ttl = ttl
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self.code_factory = code_factory

    @staticmethod
    def key(identifier: Identifier, purpose: str) -> CodeKey:
        return (identifier.channel, identifier.value, purpose)

    async def issue(
        self,
        identifier: Identifier,
        purpose: str,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> IssuedCode:
        """
        Store a fresh code for (identifier, purpose) and hand it to the channel.

        The record is written before delivery starts. With background_tasks the
        delivery runs after the response goes out; otherwise it is awaited here.
        Either way a failed delivery leaves the stored code in place.

        The cooldown is advisory: it is reported to the caller, not enforced.
        """
        now = self.clock()
        key = self.key(identifier, purpose)

        replaced = await self.store.delete_many(key)
        code = self.code_factory()
        record = CodeRecord(
            channel=identifier.channel,
            identifier=identifier.value,
            purpose=purpose,
            code=code,
            expires_at=now + self.ttl,
            created_at=now,
        )
        await self.store.insert_one(record)

        logger.info(
            "Issued %s code for %s via %s (replaced %d)",
            purpose, identifier.masked(), identifier.channel, replaced,
        )
        logger.debug("Issued code value for %s: %s", identifier.masked(), code)

        if background_tasks is not None:
            background_tasks.add_task(self.deliver, identifier, code, purpose)
        else:
            await self.deliver(identifier, code, purpose)

        return IssuedCode(code=code, expires_at=record.expires_at, cooldown_seconds=self.cooldown_seconds)

    async def deliver(self, identifier: Identifier, code: str, purpose: str) -> DeliveryResult:
        sender = self.senders.get(identifier.channel)
        if sender is None:
            logger.error("No sender registered for channel '%s'", identifier.channel)
            return DeliveryResult(delivered=False)

        try:
            result = await sender.send(identifier.value, code, purpose)
        except Exception:
            # The code stays stored; the caller can still redeem or re-request it
            logger.exception("Verification code delivery failed for %s via %s", identifier.masked(), identifier.channel)
            return DeliveryResult(delivered=False)

        if result.delivered:
            logger.info("Verification code delivered to %s via %s", identifier.masked(), identifier.channel)
        return result

    async def validate(self, identifier: Identifier, purpose: str, submitted_code: str) -> bool:
        if not submitted_code or not CODE_RE.fullmatch(submitted_code):
            return False

        record = await self.store.find_one_and_delete(self.key(identifier, purpose), submitted_code, self.clock())
        if record is None:
            logger.info("Rejected %s code for %s", purpose, identifier.masked())
            return False

        logger.info("Consumed %s code for %s", purpose, identifier.masked())
        return True

    async def consume(self, identifier: Identifier, purpose: str, submitted_code: str) -> None:
        """Like validate, but raises InvalidVerificationCode on failure."""
        if not await self.validate(identifier, purpose, submitted_code):
            raise InvalidVerificationCode()

    async def purge_expired(self) -> int:
        removed = await self.store.purge_expired(self.clock())
        if removed:
            logger.info("Purged %d expired verification codes", removed)
        return removed


@lru_cache(maxsize=1)
def get_code_service() -> VerificationCodeService:
    return VerificationCodeService(
        store=build_code_store(settings.CODE_STORE_BACKEND),
        senders=build_senders(),
        ttl=timedelta(minutes=settings.CODE_TTL_MINUTES),
        cooldown_seconds=settings.CODE_COOLDOWN_SECONDS,
    )
