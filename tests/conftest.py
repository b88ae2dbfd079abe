import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure local source package (src/restbound) is importable before tests collect
_PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
_SRC_PATH: Path = _PROJECT_ROOT / "src"
if _SRC_PATH.exists():
    sys.path.insert(0, str(_SRC_PATH))

from restbound import ApiClient, ClientSettings, Config, reset_default_settings  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def base_url() -> str:
    return "https://api.example.com"


@pytest.fixture
def secret() -> str:
    return "secret"


@pytest.fixture
def config(base_url: str, secret: str) -> Config:
    return Config(base_url=base_url, secret=secret)


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings()


@pytest.fixture
def client(config: Config, settings: ClientSettings) -> Generator[ApiClient, None, None]:
    with ApiClient(config=config, settings=settings) as api_client:
        yield api_client


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clean environment variables before each test."""
    monkeypatch.delenv("RESTBOUND_URL", raising=False)
    monkeypatch.delenv("RESTBOUND_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("RESTBOUND_TIMEOUT", raising=False)


@pytest.fixture(autouse=True)
def default_settings() -> Generator[None, None, None]:
    reset_default_settings()
    yield
    reset_default_settings()
