from functools import lru_cache
from datetime import timedelta
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from justoo.core.utils import parse_duration

DEV_CUSTOMER_JWT_SECRET = "dev-customer-jwt-secret"


class MisconfiguredError(RuntimeError):
    pass


class MisconfiguredSecretError(MisconfiguredError):
    pass


class MisconfiguredSmsBackendError(MisconfiguredError):
    pass


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    PROJECT_NAME: str = "Justoo"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )

    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "justoo"
    DATABASE_URL: Optional[str] = None
    AUTO_CREATE_TABLES: bool = False

    FRONTEND_ORIGIN: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Customer OTP login
    CUSTOMER_OTP_TTL_MS: int = 1000 * 60 * 5
    CUSTOMER_JWT_TTL: str = "7d"
    CUSTOMER_JWT_SECRET: str = DEV_CUSTOMER_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"

    # OTP delivery: "log" prints codes to the log, "twilio" sends real SMS
    SMS_BACKEND: str = "log"
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_FROM_NUMBER: str = ""

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"

    @property
    def otp_ttl(self) -> timedelta:
        return timedelta(milliseconds=self.CUSTOMER_OTP_TTL_MS)

    @property
    def customer_jwt_ttl(self) -> timedelta:
        return parse_duration(self.CUSTOMER_JWT_TTL)

    @property
    def cors_origins(self) -> list[str]:
        if not self.FRONTEND_ORIGIN:
            return ["*"]
        return [origin.strip() for origin in self.FRONTEND_ORIGIN.split(",") if origin.strip()]

    def require_jwt_secret(self) -> str:
        """
        Return the customer token signing secret.

        Refuses to hand out the development placeholder when running in production.
        """
        secret = self.CUSTOMER_JWT_SECRET or DEV_CUSTOMER_JWT_SECRET
        if self.is_production and secret == DEV_CUSTOMER_JWT_SECRET:
            raise MisconfiguredSecretError("CUSTOMER_JWT_SECRET is required in production")
        return secret

    def require_sms_backend(self) -> str:
        """
        Return the normalised OTP delivery backend.

        The "log" backend writes phones and codes to stdout, so production refuses it.
        """
        backend = self.SMS_BACKEND.strip().lower()
        if self.is_production and backend == "log":
            raise MisconfiguredSmsBackendError("SMS_BACKEND=log is not allowed in production")
        return backend


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
