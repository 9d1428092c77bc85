from sqlmodel import SQLModel, Field
from datetime import datetime

from justoo.core.utils import utcnow

class PhoneWhitelist(SQLModel, table=True):
    __tablename__ = "phone_whitelist"
    phone: str = Field(primary_key=True, max_length=32)
    created_at: datetime = Field(default_factory=utcnow)
