from sqlmodel import SQLModel
from .phone_whitelist import PhoneWhitelist
from .customer_otp import CustomerOtp
from .customer import Customer
from .customer_session import CustomerSession

__all__ = [
    "SQLModel",
    "PhoneWhitelist",
    "CustomerOtp",
    "Customer",
    "CustomerSession",
]
