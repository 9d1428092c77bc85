import pytest

from justoo.core.config import Settings
from justoo.services.auth_service import CustomerAuthService

from tests.fakes import PHONE, TEST_SECRET, FakeAuthStore, FakeClock, FakeSmsSender


@pytest.fixture
def settings():
    return Settings(_env_file=None, CUSTOMER_JWT_SECRET=TEST_SECRET)


@pytest.fixture
def store():
    return FakeAuthStore(whitelist={PHONE})


@pytest.fixture
def sms_sender():
    return FakeSmsSender()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(store, settings, sms_sender, clock):
    return CustomerAuthService(store, settings, sms_sender, clock=clock)


@pytest.fixture
def fixed_otp(monkeypatch):
    monkeypatch.setattr("justoo.services.auth_service.generate_otp", lambda: "482913")
    return "482913"
