from lumina.core.config import settings
from lumina.core.mail_config import get_mail_config
from lumina.services.delivery.base import BaseCodeSender, DeliveryResult
from lumina.services.delivery.email_sender import EmailCodeSender
from lumina.services.delivery.sms_sender import SmsCodeSender


def build_senders() -> dict:
    """Channel name -> sender, wired from settings."""
    return {
        "email": EmailCodeSender(conf=get_mail_config()),
        "sms": SmsCodeSender(
            gateway_url=settings.SMS_GATEWAY_URL,
            api_token=settings.SMS_API_TOKEN,
            timeout=settings.SMS_TIMEOUT_SECONDS,
        ),
    }


__all__ = ["BaseCodeSender", "DeliveryResult", "EmailCodeSender", "SmsCodeSender", "build_senders"]
