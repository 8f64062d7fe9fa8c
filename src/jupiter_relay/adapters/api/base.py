"""
HTTP executors consumed by the Jupiter adapters.

The executor is the only component that touches the network. It receives a
fully built :class:`~jupiter_relay.adapters.api.requests.RequestDescriptor`,
performs one round trip, and either returns the decoded JSON payload unchanged
or raises :class:`~jupiter_relay.adapters.base.HttpError`. There is no retry
layer: a failed call is reported once and the batch runner decides what to do.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Dict, MutableMapping, Optional, Protocol

import httpx

from ...core.context import DEFAULT_TIMEOUT
from ...core.logging import get_logger
from ..base import HttpError
from .requests import RequestDescriptor


class HttpExecutor(Protocol):
    """Perform a request and return its JSON payload, or raise :class:`HttpError`."""

    def execute(self, request: RequestDescriptor) -> Any:
        ...


@dataclass(slots=True)
class HttpxExecutor:
    """
    Synchronous executor built on :mod:`httpx`.

    Parameters
    ----------
    timeout:
        Request timeout in seconds.
    default_headers:
        Headers attached to every request. Request headers take precedence.
    transport:
        Optional httpx transport, e.g. :class:`httpx.MockTransport` in tests.
    """

    timeout: float = DEFAULT_TIMEOUT
    default_headers: MutableMapping[str, str] = field(default_factory=lambda: {"Accept": "application/json", "User-Agent": "jupiter-relay"})
    transport: Optional[httpx.BaseTransport] = None
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            headers=dict(self.default_headers),
            follow_redirects=True,
            transport=self.transport,
        )

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise HttpError(
                f"HTTP {exc.response.status_code} error for {exc.request.method} {exc.request.url}: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc

    def execute(self, request: RequestDescriptor) -> Any:
        method = request.method.value
        self.logger.debug(
            "HTTP request",
            extra={"method": method, "url": request.url, "params": dict(request.query) or None},
        )

        kwargs: Dict[str, Any] = {}
        if request.query:
            kwargs["params"] = dict(request.query)
        if request.body:
            kwargs["json"] = dict(request.body)
        if request.headers:
            kwargs["headers"] = dict(request.headers)

        try:
            with self._build_client() as client:
                response = client.request(method, request.url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self.logger.error(
                "HTTP error during request",
                extra={"method": method, "url": request.url, "error": str(exc)},
            )
            raise HttpError(f"HTTP error while calling {method} {request.url}: {exc}") from exc

        self._raise_for_status(response)
        self.logger.debug(
            "HTTP response",
            extra={"status_code": response.status_code, "url": str(response.url)},
        )
        try:
            return response.json()
        except ValueError as exc:
            raise HttpError(f"Failed to decode JSON from {response.url}: {exc}", status_code=response.status_code) from exc


@dataclass(slots=True)
class DryRunExecutor:
    """Executor that echoes the request plan instead of sending it."""

    def execute(self, request: RequestDescriptor) -> Any:
        return {"dryRun": True, "request": request.as_dict()}
