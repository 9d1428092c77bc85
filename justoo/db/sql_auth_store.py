from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from justoo.core.utils import utcnow
from justoo.db.models import Customer, CustomerOtp, CustomerSession, PhoneWhitelist
from justoo.services.auth_store import AuthStore, AuthTransaction, CustomerRecord, OtpRecord


def _insert(session: AsyncSession, table):
    # ON CONFLICT support lives in the dialect-specific insert constructs
    if session.bind is not None and session.bind.dialect.name == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)


def _to_customer(customer: Customer) -> CustomerRecord:
    return CustomerRecord(
        id=customer.id,
        name=customer.name,
        phone=customer.phone,
        email=customer.email,
        created_at=customer.created_at,
    )


class SqlAuthTransaction(AuthTransaction):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_otp(self, phone: str) -> Optional[OtpRecord]:
        # Plain columns, so a stale identity-map copy can never mask "used"
        stmt = select(
            CustomerOtp.phone,
            CustomerOtp.otp_hash,
            CustomerOtp.expires_at,
            CustomerOtp.used,
        ).where(CustomerOtp.phone == phone).limit(1)
        result = await self.session.execute(stmt)
        row = result.first()
        if not row:
            return None
        return OtpRecord(phone=row.phone, otp_hash=row.otp_hash, expires_at=row.expires_at, used=row.used)

    async def delete_otp(self, phone: str) -> None:
        await self.session.execute(delete(CustomerOtp).where(CustomerOtp.phone == phone))

    async def claim_otp(self, phone: str) -> bool:
        stmt = (
            update(CustomerOtp)
            .where(CustomerOtp.phone == phone, CustomerOtp.used == False)  # noqa: E712
            .values(used=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def get_customer_by_phone(self, phone: str) -> Optional[CustomerRecord]:
        stmt = select(Customer).where(Customer.phone == phone).limit(1)
        result = await self.session.execute(stmt)
        customer = result.scalars().first()
        return _to_customer(customer) if customer else None

    async def create_customer(self, name: str, phone: str) -> Optional[CustomerRecord]:
        # A concurrent first login for the same phone loses the insert and
        # picks up the winner's row on the re-read
        stmt = (
            _insert(self.session, Customer)
            .values(id=uuid4(), name=name, phone=phone, email=None, created_at=utcnow())
            .on_conflict_do_nothing(index_elements=["phone"])
        )
        await self.session.execute(stmt)
        return await self.get_customer_by_phone(phone)

    async def add_session(self, customer_id: UUID, token_hash: str, expires_at: datetime) -> None:
        stmt = (
            _insert(self.session, CustomerSession)
            .values(
                id=uuid4(),
                customer_id=customer_id,
                token_hash=token_hash,
                expires_at=expires_at,
                created_at=utcnow(),
            )
            .on_conflict_do_nothing(index_elements=["token_hash"])
        )
        await self.session.execute(stmt)


class SqlAuthStore(AuthStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def is_whitelisted(self, phone: str) -> bool:
        stmt = select(PhoneWhitelist.phone).where(PhoneWhitelist.phone == phone).limit(1)
        result = await self.session.execute(stmt)
        found = result.scalars().first()
        # Release the read transaction so a later begin() starts clean
        await self.session.commit()
        return bool(found)

    async def upsert_otp(self, phone: str, otp_hash: str, expires_at: datetime) -> None:
        now = utcnow()
        stmt = _insert(self.session, CustomerOtp).values(
            phone=phone,
            otp_hash=otp_hash,
            expires_at=expires_at,
            used=False,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["phone"],
            set_={"otp_hash": otp_hash, "expires_at": expires_at, "used": False, "updated_at": now},
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def delete_session(self, token_hash: str) -> bool:
        result = await self.session.execute(
            delete(CustomerSession).where(CustomerSession.token_hash == token_hash)
        )
        await self.session.commit()
        return result.rowcount > 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AuthTransaction]:
        async with self.session.begin():
            yield SqlAuthTransaction(self.session)
