import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from gaap_mcp.config import Credentials
from gaap_mcp.observability import logging as gaap_logging


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(tenant_id="t1", api_key="key-123", webhook_secret="s3cr3t")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "GAAP_TENANT_ID",
        "GAAP_API_KEY",
        "GAAP_WEBHOOK_SECRET",
        "GAAP_MCP_URL",
        "GAAP_TIMEOUT_SECONDS",
        "GAAP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the checkout out of the picture.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def restore_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    monkeypatch.setattr(gaap_logging, "_LOGGING_CONFIGURED", False)
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)
