import re
import secrets
from datetime import datetime, timedelta, timezone

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w|y)?\s*$", re.IGNORECASE)

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
    "w": 60 * 60 * 24 * 7,
    "y": 60 * 60 * 24 * 365.25,
}


def utcnow() -> datetime:
    # Timezone-aware UTC; the timestamp columns reject naive values
    return datetime.now(timezone.utc)


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def default_customer_name(phone: str) -> str:
    last4 = phone[-4:]
    return f"Customer {last4}" if last4 else "Customer"


def mask_phone(phone: str) -> str:
    if len(phone) <= 4:
        return "*" * len(phone)
    return "*" * (len(phone) - 4) + phone[-4:]


def parse_duration(value) -> timedelta:
    """
    Parse a token lifetime such as "7d", "12h", "30m", "45s", "500ms" or a bare
    number of seconds.
    """
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    seconds = float(amount) * _UNIT_SECONDS[(unit or "s").lower()]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return timedelta(seconds=seconds)
