"""
Persistence for verification codes.

Every backend offers the same small contract. The one operation that matters
for correctness is `find_one_and_delete`: it must match and remove a record in
a single step so two concurrent redemptions of the same code cannot both win.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import List, Optional, Tuple

from lumina.schemas.verification_code import VerificationCode

logger = logging.getLogger(__name__)

# (channel, identifier, purpose)
CodeKey = Tuple[str, str, str]


@dataclass(frozen=True)
class CodeRecord:
    channel: str
    identifier: str
    purpose: str
    code: str
    expires_at: datetime
    created_at: datetime

    @property
    def key(self) -> CodeKey:
        return (self.channel, self.identifier, self.purpose)

    def is_live(self, now: datetime) -> bool:
        return self.expires_at > now


class CodeStore(ABC):
    @abstractmethod
    async def delete_many(self, key: CodeKey) -> int:
        """Remove every code stored under key, live or not."""

    @abstractmethod
    async def insert_one(self, record: CodeRecord) -> None:
        pass

    @abstractmethod
    async def find_one_and_delete(self, key: CodeKey, code: str, now: datetime) -> Optional[CodeRecord]:
        """Atomically remove and return the live record matching key and code."""

    @abstractmethod
    async def purge_expired(self, now: datetime) -> int:
        pass

    @abstractmethod
    async def count_live(self, key: CodeKey, now: datetime) -> int:
        pass


def _key_filter(key: CodeKey) -> dict:
    channel, identifier, purpose = key
    return {"channel": channel, "identifier": identifier, "purpose": purpose}


class MongoCodeStore(CodeStore):
    """Store backed by the `verification_codes` collection (requires init_beanie)."""

    async def delete_many(self, key: CodeKey) -> int:
        result = await VerificationCode.find(_key_filter(key)).delete()
        return result.deleted_count if result else 0

    async def insert_one(self, record: CodeRecord) -> None:
        await VerificationCode(**asdict(record)).insert()

    async def find_one_and_delete(self, key: CodeKey, code: str, now: datetime) -> Optional[CodeRecord]:
        query = {**_key_filter(key), "code": code, "expires_at": {"$gt": now}}
        raw = await VerificationCode.get_motor_collection().find_one_and_delete(query)
        if raw is None:
            return None
        return CodeRecord(**{f.name: raw[f.name] for f in fields(CodeRecord)})

    async def purge_expired(self, now: datetime) -> int:
        result = await VerificationCode.find({"expires_at": {"$lte": now}}).delete()
        return result.deleted_count if result else 0

    async def count_live(self, key: CodeKey, now: datetime) -> int:
        return await VerificationCode.find({**_key_filter(key), "expires_at": {"$gt": now}}).count()


class MemoryCodeStore(CodeStore):
    """In-process store for single-worker local runs and tests."""

    def __init__(self):
        self._records: List[CodeRecord] = []
        self._lock = asyncio.Lock()

    async def delete_many(self, key: CodeKey) -> int:
        async with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.key != key]
            return before - len(self._records)

    async def insert_one(self, record: CodeRecord) -> None:
        async with self._lock:
            self._records.append(record)

    async def find_one_and_delete(self, key: CodeKey, code: str, now: datetime) -> Optional[CodeRecord]:
        async with self._lock:
            for index, record in enumerate(self._records):
                if record.key == key and record.code == code and record.is_live(now):
                    return self._records.pop(index)
            return None

    async def purge_expired(self, now: datetime) -> int:
        async with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.is_live(now)]
            return before - len(self._records)

    async def count_live(self, key: CodeKey, now: datetime) -> int:
        async with self._lock:
            return sum(1 for r in self._records if r.key == key and r.is_live(now))

    def __len__(self) -> int:
        return len(self._records)


def build_code_store(backend: str) -> CodeStore:
    if backend == "memory":
        logger.warning("Using in-process verification code store; codes are lost on restart")
        return MemoryCodeStore()
    return MongoCodeStore()
