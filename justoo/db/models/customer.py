from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from uuid import UUID, uuid4

from justoo.core.utils import utcnow

if TYPE_CHECKING:
    from .customer_session import CustomerSession

class Customer(SQLModel, table=True):
    __tablename__ = "customers"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    phone: str = Field(unique=True, index=True, max_length=32)
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    sessions: List["CustomerSession"] = Relationship(back_populates="customer")
