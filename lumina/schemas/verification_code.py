from datetime import datetime
from typing import Literal

from beanie import Document
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from lumina.utils.datetime import utcnow


class VerificationCode(Document):
    channel: Literal["sms", "email"]
    identifier: str
    purpose: Literal["login", "register", "reset"] = "login"
    code: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "verification_codes"
        indexes = [
            IndexModel(
                [("channel", ASCENDING), ("identifier", ASCENDING), ("purpose", ASCENDING)],
                name="code_lookup",
            ),
            # Mongo's TTL monitor drops rows once expires_at has passed
            IndexModel([("expires_at", ASCENDING)], name="code_ttl", expireAfterSeconds=0),
        ]
