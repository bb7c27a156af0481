import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, TypeAdapter, ValidationError

from lumina.core.exceptions import InvalidIdentifier

Channel = Literal["sms", "email"]

_email_adapter = TypeAdapter(EmailStr)
PHONE_PATTERN = re.compile(r"^\+?\d{6,15}$")
_PHONE_SEPARATORS = re.compile(r"[\s\-().]")


class Identifier(BaseModel):
    """Destination a verification code is bound to: an email address or a phone number."""

    model_config = ConfigDict(frozen=True)

    channel: Channel
    value: str

    @classmethod
    def parse(cls, raw: str, channel: Optional[Channel] = None) -> "Identifier":
        """
        Normalize a raw identifier string.

        Without an explicit channel anything containing "@" is treated as an
        email address and everything else as a phone number. Emails are
        lower-cased; phone numbers lose spaces, dashes, dots and parentheses.
        """
        raw = (raw or "").strip()
        if channel is None:
            channel = "email" if "@" in raw else "sms"

        if channel == "email":
            try:
                value = str(_email_adapter.validate_python(raw)).lower()
            except ValidationError:
                raise InvalidIdentifier("Please enter a valid email address")
        else:
            value = _PHONE_SEPARATORS.sub("", raw)
            if not PHONE_PATTERN.match(value):
                raise InvalidIdentifier("Please enter a valid mobile number")

        return cls(channel=channel, value=value)

    @property
    def is_email(self) -> bool:
        return self.channel == "email"

    def masked(self) -> str:
        """Form safe to put in log lines."""
        if self.is_email:
            local, _, domain = self.value.partition("@")
            return f"{local[:2]}***@{domain}"
        return f"{self.value[:3]}****{self.value[-2:]}"
