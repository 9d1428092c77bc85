from dataclasses import dataclass
from datetime import datetime
from typing import AsyncContextManager, Optional, Protocol
from uuid import UUID


@dataclass(frozen=True)
class OtpRecord:
    phone: str
    otp_hash: str
    expires_at: datetime
    used: bool


@dataclass(frozen=True)
class CustomerRecord:
    id: UUID
    name: str
    phone: str
    email: Optional[str]
    created_at: datetime


class AuthTransaction(Protocol):
    """Operations available inside one OTP verification transaction."""

    async def get_otp(self, phone: str) -> Optional[OtpRecord]:
        ...

    async def delete_otp(self, phone: str) -> None:
        ...

    async def claim_otp(self, phone: str) -> bool:
        """Flip used false -> true; False when another verifier got there first."""
        ...

    async def get_customer_by_phone(self, phone: str) -> Optional[CustomerRecord]:
        ...

    async def create_customer(self, name: str, phone: str) -> Optional[CustomerRecord]:
        """Insert unless the phone already exists, then return the stored row."""
        ...

    async def add_session(self, customer_id: UUID, token_hash: str, expires_at: datetime) -> None:
        """Record a session; a duplicate token hash is ignored."""
        ...


class AuthStore(Protocol):
    async def is_whitelisted(self, phone: str) -> bool:
        ...

    async def upsert_otp(self, phone: str, otp_hash: str, expires_at: datetime) -> None:
        ...

    async def delete_session(self, token_hash: str) -> bool:
        ...

    def transaction(self) -> AsyncContextManager[AuthTransaction]:
        """Commit on normal exit, roll back if the block raises."""
        ...
