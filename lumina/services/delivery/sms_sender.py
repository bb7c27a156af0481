import logging
from typing import Optional

import httpx

from lumina.core.config import settings
from lumina.services.delivery.base import BaseCodeSender, DeliveryResult

logger = logging.getLogger(__name__)


class SmsCodeSender(BaseCodeSender):
    """Posts the code to an HTTP SMS gateway with a bearer token."""

    channel = "sms"

    def __init__(
        self,
        gateway_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.gateway_url = gateway_url
        self.api_token = api_token
        self.timeout = timeout
        self.transport = transport

    async def send(self, identifier: str, code: str, purpose: str) -> DeliveryResult:
        if not (self.gateway_url and self.api_token):
            logger.info("[SMS] to=%s code=%s (sms gateway not configured, logged only)", identifier, code)
            return DeliveryResult(delivered=False, simulated=True)

        text = f"Your {settings.MAIL_BRAND_NAME} code is {code}. It expires in {settings.CODE_TTL_MINUTES} minutes."
        headers = {"Authorization": f"Bearer {self.api_token}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.gateway_url, data={"to": identifier, "txt": text}, headers=headers)
            response.raise_for_status()

        logger.info("SMS gateway accepted message (status=%s)", response.status_code)
        return DeliveryResult(delivered=True)
