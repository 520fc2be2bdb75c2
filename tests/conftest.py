from typing import Generator

import pytest

from restassured import Config, Dispatcher, close_default_dispatcher
from restassured._utils.constants import (
    ENV_BASE_URL,
    ENV_FOLLOW_REDIRECTS,
    ENV_TIMEOUT,
    ENV_VERIFY_SSL,
)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clean environment variables and the shared dispatcher for each test."""
    for env_var in (ENV_BASE_URL, ENV_TIMEOUT, ENV_FOLLOW_REDIRECTS, ENV_VERIFY_SSL):
        monkeypatch.delenv(env_var, raising=False)
    close_default_dispatcher()
    yield
    close_default_dispatcher()


@pytest.fixture
def base_url() -> str:
    return "https://api.example.com"


@pytest.fixture
def config() -> Config:
    return Config(timeout=10)


@pytest.fixture
def dispatcher(config: Config) -> Generator[Dispatcher, None, None]:
    with Dispatcher(config=config) as dispatcher:
        yield dispatcher
