from __future__ import annotations

from typing import Any, Callable, List, Optional

import pytest
from typer.testing import CliRunner

from jupiter_relay.adapters.api import RequestDescriptor
from jupiter_relay.cli.main import app
from jupiter_relay.core.catalog import OperationCatalog, load_catalog
from jupiter_relay.core.logging import configure_logging


class RecordingExecutor:
    """Executor double that records descriptors and replies from a callable."""

    def __init__(self, reply: Optional[Callable[[RequestDescriptor], Any]] = None) -> None:
        self.requests: List[RequestDescriptor] = []
        self._reply = reply

    def execute(self, request: RequestDescriptor) -> Any:
        self.requests.append(request)
        if self._reply is None:
            return {"ok": True, "url": request.url}
        return self._reply(request)


@pytest.fixture(autouse=True, scope="session")
def _configure_logging():
    """Bind the log handler before any CLI invocation swaps out the standard streams."""

    configure_logging()


@pytest.fixture()
def swap_catalog() -> OperationCatalog:
    return load_catalog("swap")


@pytest.fixture()
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture()
def isolated_secrets(tmp_path, monkeypatch):
    """Point secrets discovery at an empty directory so local files never leak into tests."""

    monkeypatch.delenv("JUPITER_API_KEY", raising=False)
    monkeypatch.setenv("JUPITER_SECRETS_PATH", str(tmp_path / "missing.toml"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_app():
    return app


@pytest.fixture()
def executor_factory() -> Callable[..., RecordingExecutor]:
    return RecordingExecutor
