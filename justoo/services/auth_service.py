from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from fastapi import BackgroundTasks

from justoo.core.config import Settings
from justoo.core.errors import AuthError
from justoo.core.logger import get_logger
from justoo.core.security import (
    create_customer_token,
    decode_customer_token,
    extract_bearer_token,
    hash_otp,
    hash_token,
    token_expiry,
)
from justoo.core.utils import default_customer_name, generate_otp, mask_phone, utcnow
from justoo.services.auth_store import AuthStore, AuthTransaction, CustomerRecord
from justoo.services.sms import SmsSender, deliver_otp

logger = get_logger(__name__)

TokenIssuer = Callable[[CustomerRecord], str]


class VerifyStatus(str, Enum):
    OK = "ok"
    OTP_EXPIRED = "otp_expired"
    OTP_INVALID = "otp_invalid"
    TOKEN_FAILED = "token_failed"
    FAILED = "failed"


@dataclass(frozen=True)
class VerifyResult:
    status: VerifyStatus
    token: Optional[str] = None
    customer: Optional[CustomerRecord] = None


def normalize_phone(phone: Any) -> str:
    return str(phone if phone is not None else "").strip()


def normalize_otp(otp: Any) -> str:
    return str(otp if otp is not None else "").strip()


async def consume_otp_and_login(
    tx: AuthTransaction,
    phone: str,
    otp: str,
    now: datetime,
    issue_token: TokenIssuer,
) -> VerifyResult:
    """
    Run one verification attempt inside an open transaction.

    Wrong code, missing code and already used code all come back as
    OTP_INVALID so callers cannot tell them apart. Only an expired code gets
    its own status, and its row is removed.
    """
    record = await tx.get_otp(phone)
    if record is None or record.used:
        return VerifyResult(VerifyStatus.OTP_INVALID)

    if record.expires_at and now > record.expires_at:
        await tx.delete_otp(phone)
        return VerifyResult(VerifyStatus.OTP_EXPIRED)

    if record.otp_hash != hash_otp(phone, otp):
        return VerifyResult(VerifyStatus.OTP_INVALID)

    # Conditional update: of several verifiers that got this far only one wins
    if not await tx.claim_otp(phone):
        return VerifyResult(VerifyStatus.OTP_INVALID)

    customer = await tx.get_customer_by_phone(phone)
    if customer is None:
        customer = await tx.create_customer(default_customer_name(phone), phone)
        if customer is None:
            return VerifyResult(VerifyStatus.FAILED)

    token = issue_token(customer)
    expires_at = token_expiry(token) if token else None
    if expires_at is None:
        return VerifyResult(VerifyStatus.TOKEN_FAILED)

    await tx.add_session(customer.id, hash_token(token), expires_at)
    return VerifyResult(VerifyStatus.OK, token=token, customer=customer)


class CustomerAuthService:
    def __init__(
        self,
        store: AuthStore,
        settings: Settings,
        sms_sender: SmsSender,
        clock: Callable[[], datetime] = utcnow,
        token_issuer: Optional[TokenIssuer] = None,
    ):
        self.store = store
        self.settings = settings
        self.sms_sender = sms_sender
        self.clock = clock
        self.token_issuer = token_issuer or self._issue_token

    def _issue_token(self, customer: CustomerRecord) -> str:
        return create_customer_token(customer.id, customer.phone, self.settings)

    async def send_otp(self, phone: Any, background_tasks: Optional[BackgroundTasks] = None) -> None:
        phone = normalize_phone(phone)
        if not phone:
            raise AuthError(400, "PHONE_REQUIRED")

        if not await self.store.is_whitelisted(phone):
            logger.info(f"OTP refused for non-whitelisted phone {mask_phone(phone)}")
            raise AuthError(403, "PHONE_NOT_WHITELISTED")

        otp = generate_otp()
        expires_at = self.clock() + self.settings.otp_ttl
        # Overwrites whatever code was outstanding for this phone
        await self.store.upsert_otp(phone, hash_otp(phone, otp), expires_at)
        logger.info(f"OTP issued for {mask_phone(phone)}, expires at {expires_at.isoformat()}")

        if background_tasks is not None:
            background_tasks.add_task(deliver_otp, self.sms_sender, phone, otp)
        else:
            deliver_otp(self.sms_sender, phone, otp)

    async def verify_otp(self, phone: Any, otp: Any) -> VerifyResult:
        phone = normalize_phone(phone)
        otp = normalize_otp(otp)
        if not phone or not otp:
            raise AuthError(400, "PHONE_AND_OTP_REQUIRED")

        now = self.clock()
        async with self.store.transaction() as tx:
            result = await consume_otp_and_login(tx, phone, otp, now, self.token_issuer)

        if result.status is VerifyStatus.OK:
            logger.info(f"Customer {result.customer.id} logged in via OTP")
        else:
            logger.info(f"OTP verification for {mask_phone(phone)} failed: {result.status.value}")
        return result

    async def logout(self, authorization: Optional[str]) -> bool:
        """
        Revoke the session behind a bearer token.

        Returns whether a session row was removed; a token whose session is
        already gone still counts as a successful logout.
        """
        token = extract_bearer_token(authorization)
        if not token:
            raise AuthError(401, "TOKEN_REQUIRED")

        payload = decode_customer_token(token, self.settings)
        if payload is None:
            raise AuthError(401, "TOKEN_INVALID")

        removed = await self.store.delete_session(hash_token(token))
        logger.info(f"Customer {payload.get('sub')} logged out (session found: {removed})")
        return removed
