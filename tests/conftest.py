import pytest

from tests.helpers import API_BASE, FakeBackend
from webtocase.captcha.registry import CallbackRegistry
from webtocase.config.settings import Settings


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        api_base=API_BASE,
        captcha_token="token-abc",
    )


@pytest.fixture()
def registry() -> CallbackRegistry:
    return CallbackRegistry()
