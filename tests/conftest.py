import os

# Settings are read at import time, so the environment has to be in place first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CODE_STORE_BACKEND", "memory")
os.environ.setdefault("EXPOSE_VERIFICATION_CODE", "false")
os.environ.setdefault("ENVIRONMENT", "testing")

from datetime import datetime, timedelta

import pytest

from lumina.db.code_store import MemoryCodeStore
from lumina.services.delivery.base import BaseCodeSender, DeliveryResult
from lumina.services.verification_codes import VerificationCodeService


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingSender(BaseCodeSender):
    def __init__(self, channel: str = "email", fail: bool = False):
        self.channel = channel
        self.fail = fail
        self.sent = []

    async def send(self, identifier: str, code: str, purpose: str) -> DeliveryResult:
        if self.fail:
            raise ConnectionError("smtp server unreachable")
        self.sent.append((identifier, code, purpose))
        return DeliveryResult(delivered=True)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 12, 0, 0))


@pytest.fixture
def store():
    return MemoryCodeStore()


@pytest.fixture
def email_sender():
    return RecordingSender("email")


@pytest.fixture
def sms_sender():
    return RecordingSender("sms")


@pytest.fixture
def service(store, email_sender, sms_sender, clock):
    return VerificationCodeService(
        store=store,
        senders={"email": email_sender, "sms": sms_sender},
        ttl=timedelta(minutes=5),
        cooldown_seconds=60,
        clock=clock,
    )
