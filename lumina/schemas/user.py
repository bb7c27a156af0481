from datetime import datetime
from typing import Optional
from urllib.parse import quote

from beanie import Document, Replace, Save, before_event
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from lumina.utils.datetime import utcnow

DEFAULT_BIO = "New visual creator."


def default_avatar(seed: str) -> str:
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={quote(seed)}"


class User(Document):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    avatar: Optional[str] = None
    bio: str = DEFAULT_BIO

    email_verified: bool = False
    phone_verified: bool = False

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "users"
        # Unset contacts are stored as null, so uniqueness only covers real strings
        indexes = [
            IndexModel(
                [("email", ASCENDING)],
                unique=True,
                partialFilterExpression={"email": {"$type": "string"}},
            ),
            IndexModel(
                [("phone", ASCENDING)],
                unique=True,
                partialFilterExpression={"phone": {"$type": "string"}},
            ),
        ]

    @before_event(Replace, Save)
    def touch(self):
        self.updated_at = utcnow()
