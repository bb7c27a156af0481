import logging
from typing import Optional

from fastapi_mail import ConnectionConfig

from lumina.core.config import settings
from lumina.services.delivery.base import BaseCodeSender, DeliveryResult
from lumina.utils.send_email import send_email

logger = logging.getLogger(__name__)

SUBJECTS = {
    "login": "{brand} login code",
    "register": "{brand} verification code",
    "reset": "{brand} password reset code",
}


def render_code_email(code: str, ttl_minutes: int, brand: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 480px; margin: 0 auto; padding: 24px; color: #111;">
      <h2 style="margin: 0 0 12px;">{brand}</h2>
      <p style="margin: 0 0 12px;">Use this code to verify your email:</p>
      <p style="font-size: 28px; letter-spacing: 6px; font-weight: 700; margin: 12px 0 18px;">{code}</p>
      <p style="margin: 0 0 8px; color: #555;">The code expires in {ttl_minutes} minutes. If you did not request this, you can ignore this email.</p>
    </div>
    """


class EmailCodeSender(BaseCodeSender):
    channel = "email"

    def __init__(self, conf: Optional[ConnectionConfig] = None, brand: str = None, ttl_minutes: int = None):
        self.conf = conf
        self.brand = brand or settings.MAIL_BRAND_NAME
        self.ttl_minutes = ttl_minutes or settings.CODE_TTL_MINUTES

    async def send(self, identifier: str, code: str, purpose: str) -> DeliveryResult:
        if self.conf is None:
            logger.info("[EMAIL] to=%s code=%s (mail transport not configured, logged only)", identifier, code)
            return DeliveryResult(delivered=False, simulated=True)

        subject = SUBJECTS.get(purpose, SUBJECTS["login"]).format(brand=self.brand)
        await send_email(
            subject=subject,
            email_to=identifier,
            body=render_code_email(code, self.ttl_minutes, self.brand),
            conf=self.conf,
        )
        return DeliveryResult(delivered=True)
