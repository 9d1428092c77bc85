import asyncio
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from justoo.core.utils import utcnow
from justoo.services.auth_store import CustomerRecord, OtpRecord

TEST_SECRET = "test-customer-secret-0123456789abcdef"
PHONE = "+919876543210"


class FakeAuthTransaction:
    def __init__(self, store: "FakeAuthStore"):
        self.store = store

    async def get_otp(self, phone: str) -> Optional[OtpRecord]:
        await asyncio.sleep(0)
        return self.store.otps.get(phone)

    async def delete_otp(self, phone: str) -> None:
        self.store.otps.pop(phone, None)

    async def claim_otp(self, phone: str) -> bool:
        await asyncio.sleep(0)
        record = self.store.otps.get(phone)
        if record is None or record.used:
            return False
        self.store.otps[phone] = replace(record, used=True)
        return True

    async def get_customer_by_phone(self, phone: str) -> Optional[CustomerRecord]:
        return self.store.customers.get(phone)

    async def create_customer(self, name: str, phone: str) -> Optional[CustomerRecord]:
        await asyncio.sleep(0)
        self.store.customers.setdefault(
            phone,
            CustomerRecord(id=uuid4(), name=name, phone=phone, email=None, created_at=utcnow()),
        )
        return self.store.customers[phone]

    async def add_session(self, customer_id, token_hash: str, expires_at: datetime) -> None:
        self.store.sessions.setdefault(token_hash, (customer_id, expires_at))


class FakeAuthStore:
    """In-memory stand-in for the relational store."""

    def __init__(self, whitelist=()):
        self.whitelist = set(whitelist)
        self.otps = {}
        self.customers = {}
        self.sessions = {}

    async def is_whitelisted(self, phone: str) -> bool:
        return phone in self.whitelist

    async def upsert_otp(self, phone: str, otp_hash: str, expires_at: datetime) -> None:
        self.otps[phone] = OtpRecord(phone=phone, otp_hash=otp_hash, expires_at=expires_at, used=False)

    async def delete_session(self, token_hash: str) -> bool:
        return self.sessions.pop(token_hash, None) is not None

    @asynccontextmanager
    async def transaction(self):
        yield FakeAuthTransaction(self)


class FakeSmsSender:
    def __init__(self):
        self.sent = []

    def send(self, phone: str, body: str) -> None:
        self.sent.append((phone, body))


class FakeClock:
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


