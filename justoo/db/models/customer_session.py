from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING
from datetime import datetime
from uuid import UUID, uuid4

from justoo.core.utils import utcnow

if TYPE_CHECKING:
    from .customer import Customer

class CustomerSession(SQLModel, table=True):
    __tablename__ = "customer_sessions"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    customer_id: UUID = Field(foreign_key="customers.id", index=True)
    # sha256 of the issued token; the raw token is never stored
    token_hash: str = Field(unique=True, index=True, max_length=64)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)

    customer: "Customer" = Relationship(back_populates="sessions")
