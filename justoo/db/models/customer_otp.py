from sqlmodel import SQLModel, Field
from datetime import datetime

from justoo.core.utils import utcnow

class CustomerOtp(SQLModel, table=True):
    __tablename__ = "customer_otps"
    # One row per phone; resending overwrites it
    phone: str = Field(primary_key=True, max_length=32)
    otp_hash: str = Field(max_length=64)
    expires_at: datetime
    used: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
