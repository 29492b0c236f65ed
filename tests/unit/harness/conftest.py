import pytest

from userapi_harness.config import HarnessConfig

from .fake_api import FakeSleep, FakeUserApi

BASE_URL = "http://api.test"


@pytest.fixture
def fake_api():
    return FakeUserApi()


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def harness_config():
    return HarnessConfig(base_url=BASE_URL, retries=2, retry_delay=0.5)
