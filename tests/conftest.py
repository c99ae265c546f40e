"""Shared test fixtures for ceisa_bridge.

Provides a simulated clock, an in-process fake of the token and submission
endpoints (built on :class:`httpx.MockTransport`), isolated config
environments, output state management, and a CLI runner. Fixtures are
discovered by pytest automatically.
"""

from __future__ import annotations

import logging
import os
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import httpx
import pytest

from ceisa_bridge.config import ENV_VARS
from ceisa_bridge.models import CredentialConfig
from ceisa_bridge.output import OutputFormat, OutputManager, reset_output, set_output

LOGIN_URL = "https://x/login"
REFRESH_URL = "https://x/refresh"
SUBMIT_URL = "https://customs.example/api/submit"


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the package log handlers.

    Both cache references to sys.stdout/sys.stderr at creation time. When
    Typer's CliRunner swaps those streams and the test ends, the cached
    references point at closed files.
    """
    yield
    reset_output()
    logger = logging.getLogger("ceisa_bridge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Simulated time
# ---------------------------------------------------------------------------


class FakeClock:
    """A callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 5, 25, 8, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Fake token / submission endpoints
# ---------------------------------------------------------------------------


def token_envelope(
    access_token: str = "A1",
    refresh_token: str = "R1",
    expires_in: int = 3600,
    status: str = "success",
    message: str = "OK",
    token_type: str = "Bearer",
    scope: str = "s",
) -> dict[str, Any]:
    """Body returned by the login and refresh endpoints."""
    return {
        "status": status,
        "message": message,
        "item": {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": token_type,
            "scope": scope,
            "expires_in": expires_in,
        },
    }


class FakeServer:
    """Records requests and answers per endpoint.

    Each ``*_responses`` list holds ``(status, body)`` pairs consumed in
    order; the last pair is repeated once the list runs out. A body may be a
    mapping (sent as JSON), a string (sent as text), or an exception to raise.
    An optional ``on_refresh`` hook runs inside the refresh handler.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.login_responses: list[tuple[int, Any]] = [(200, token_envelope())]
        self.refresh_responses: list[tuple[int, Any]] = [
            (200, token_envelope(access_token="A2", refresh_token="R2"))
        ]
        self.submit_responses: list[tuple[int, Any]] = [(200, {"status": "OK", "id": "123"})]
        self.on_refresh: Optional[Callable[[], None]] = None
        self._lock = threading.Lock()

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
            if str(request.url) == LOGIN_URL:
                status, body = self._next(self.login_responses)
            elif str(request.url) == REFRESH_URL:
                status, body = self._next(self.refresh_responses)
            else:
                status, body = self._next(self.submit_responses)
        if str(request.url) == REFRESH_URL and self.on_refresh is not None:
            self.on_refresh()
        if isinstance(body, Exception):
            raise body
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @staticmethod
    def _next(responses: list[tuple[int, Any]]) -> tuple[int, Any]:
        if len(responses) > 1:
            return responses.pop(0)
        return responses[0]

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == url]


@pytest.fixture
def envelope() -> Callable[..., dict[str, Any]]:
    """The :func:`token_envelope` builder, for tests that script responses."""
    return token_envelope


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def credentials() -> CredentialConfig:
    return CredentialConfig(
        login_url=LOGIN_URL,
        refresh_url=REFRESH_URL,
        username="u",
        password="p",
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all CEISA_* environment variables and changes
    the working directory to tmp_path.

    Yields:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    yield tmp_path

    # Values loaded from a .env file bypass monkeypatch.
    for var in ENV_VARS:
        os.environ.pop(var, None)


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the duration of a test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager for the duration of a test."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
