from functools import lru_cache
from typing import Optional, Protocol

from twilio.rest import Client

from justoo.core.config import Settings, get_settings
from justoo.core.logger import get_logger
from justoo.core.utils import mask_phone

logger = get_logger(__name__)


class SmsSender(Protocol):
    def send(self, phone: str, body: str) -> None:
        ...


class LoggingSmsSender(SmsSender):
    """Development sender: writes the message to the log instead of sending it."""

    def send(self, phone: str, body: str) -> None:
        logger.info(f"SMS to {phone}: {body}")


class TwilioSmsSender(SmsSender):
    def __init__(self, settings: Settings, client: Optional[Client] = None):
        self.client = client or Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        self.from_number = settings.TWILIO_FROM_NUMBER

    def send(self, phone: str, body: str) -> None:
        if not self.from_number:
            raise RuntimeError("TWILIO_FROM_NUMBER not configured")
        message = self.client.messages.create(to=phone, from_=self.from_number, body=body)
        logger.info(f"OTP SMS queued for {mask_phone(phone)} (sid={message.sid})")


def otp_message(otp: str) -> str:
    return f"Your Justoo login code is {otp}. It expires in a few minutes."


def deliver_otp(sender: SmsSender, phone: str, otp: str) -> None:
    """
    Best-effort delivery, run after the response has been sent.

    A failure is logged and never affects the stored OTP.
    """
    try:
        sender.send(phone, otp_message(otp))
    except Exception:
        logger.exception(f"OTP delivery failed for {mask_phone(phone)}")


def build_sms_sender(settings: Settings) -> SmsSender:
    backend = settings.require_sms_backend()
    if backend == "twilio":
        return TwilioSmsSender(settings)
    if backend == "log":
        return LoggingSmsSender()
    raise ValueError(f"Unknown SMS_BACKEND: {settings.SMS_BACKEND!r}")


@lru_cache()
def get_sms_sender() -> SmsSender:
    return build_sms_sender(get_settings())
