from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def as_text(value: Any) -> Any:
    # Clients send phones and codes as numbers, booleans or worse; any
    # non-null value is taken as text and judged by the service
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class AuthRequest(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def ignore_non_object_body(cls, data: Any) -> Any:
        # A body that is not a JSON object carries no fields
        return data if isinstance(data, dict) else {}


class SendOtpRequest(AuthRequest):
    phone: Optional[str] = None

    @field_validator("phone", mode="before")
    @classmethod
    def coerce_phone(cls, value: Any) -> Any:
        return as_text(value)


class VerifyOtpRequest(AuthRequest):
    phone: Optional[str] = None
    otp: Optional[str] = None

    @field_validator("phone", "otp", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return as_text(value)


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str


class CustomerInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str
    email: Optional[str] = None
    created_at: datetime = Field(serialization_alias="createdAt")


class VerifyOtpResponse(BaseModel):
    token: str
    customer: CustomerInfo
