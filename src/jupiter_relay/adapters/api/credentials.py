"""
Optional API key lookup for the Jupiter endpoints.

The lite endpoints work without a key, so a missing credential is not an
error: the provider reports ``None`` and requests go out unauthenticated.
Store failures are logged at debug level and otherwise ignored.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Dict, Mapping, Optional, Protocol

from ...config import SecretsBundle, load_secrets
from ...core.logging import get_logger
from ..base import CredentialLookupError

API_KEY_HEADER = "x-api-key"


@dataclass(frozen=True, slots=True)
class Credential:
    api_key: str

    def __repr__(self) -> str:
        return "Credential(api_key='***')"


class CredentialStore(Protocol):
    """External key-value lookup. Raises :class:`CredentialLookupError` when unreadable."""

    def fetch(self) -> Mapping[str, object]:
        ...


@dataclass(slots=True)
class StaticCredentialStore:
    """Store holding an explicit mapping such as ``{"apiKey": "..."}``."""

    values: Mapping[str, object] = field(default_factory=dict)

    def fetch(self) -> Mapping[str, object]:
        return dict(self.values)


@dataclass(slots=True)
class SecretsCredentialStore:
    """
    Store reading the ``[jupiter]`` section of the secrets file.

    When ``bundle`` is omitted the secrets file is loaded on every fetch, so
    key rotation on disk is picked up by the next batch.
    """

    bundle: Optional[SecretsBundle] = None

    def fetch(self) -> Mapping[str, object]:
        bundle = self.bundle
        if bundle is None:
            try:
                bundle = load_secrets(strict=False)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise CredentialLookupError(f"Failed to read secrets file: {exc}") from exc
        api_key = bundle.jupiter.api_key
        return {"apiKey": api_key} if api_key else {}


@dataclass(slots=True)
class CredentialProvider:
    """Resolve the optional credential and the headers it contributes."""

    store: Optional[CredentialStore] = None
    logger: LoggerAdapter = field(default_factory=lambda: get_logger(__name__), repr=False)

    def resolve(self) -> Optional[Credential]:
        if self.store is None:
            return None
        try:
            values = self.store.fetch()
        except CredentialLookupError as exc:
            self.logger.debug("Credential lookup failed; continuing without API key", extra={"error": str(exc)})
            return None
        api_key = values.get("apiKey") or values.get("api_key")
        if isinstance(api_key, str) and api_key.strip():
            return Credential(api_key=api_key)
        return None

    def headers(self) -> Dict[str, str]:
        credential = self.resolve()
        if credential is None:
            return {}
        return {API_KEY_HEADER: credential.api_key}
