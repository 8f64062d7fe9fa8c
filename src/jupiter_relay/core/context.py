"""
Execution context shared by the CLI and programmatic callers.

The context bundles the loaded secrets with the run-level options that every
adapter invocation needs to know up front: whether requests are actually sent,
which failure policy applies, and the HTTP timeout handed to the executor.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Mapping, Optional, Sequence

from ..config import SecretsBundle, empty_secrets, load_secrets
from .logging import get_logger as _get_logger

DEFAULT_TIMEOUT = 15.0


@dataclass(slots=True)
class ExecutionOptions:
    """
    Flags controlling how adapter runs behave.

    Attributes
    ----------
    dry_run:
        When ``True`` request descriptors are echoed back instead of being sent.
    continue_on_fail:
        Selects the isolation failure policy. Failed records become error
        records and the batch keeps going.
    timeout:
        Request timeout in seconds passed to the HTTP executor.
    observability_tags:
        Additional tags surfaced in logs.
    """

    dry_run: bool = False
    continue_on_fail: bool = False
    timeout: float = DEFAULT_TIMEOUT
    observability_tags: Sequence[str] = field(default_factory=tuple)


@dataclass(slots=True)
class ExecutionContext:
    """
    Shared execution context across CLI commands.

    Attributes
    ----------
    secrets:
        Bundled secret values loaded from ``.secrets``.
    options:
        Run-level flags toggled by the caller.
    extra:
        Free-form slot for additional metadata.
    """

    secrets: SecretsBundle
    options: ExecutionOptions = field(default_factory=ExecutionOptions)
    extra: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def build_default(
        cls,
        *,
        options: Optional[ExecutionOptions] = None,
        secrets: Optional[SecretsBundle] = None,
    ) -> "ExecutionContext":
        """
        Construct a context using sensible defaults.

        When ``secrets`` is omitted the helper calls :func:`load_secrets` in
        non-strict mode, so a missing secrets file yields an empty bundle. An
        unreadable or malformed file is logged at debug level and treated the
        same way, leaving requests unauthenticated.
        """

        if secrets is None:
            secrets = _load_secrets_quietly()
        return cls(
            secrets=secrets,
            options=options or ExecutionOptions(),
        )

    def get_logger(self, name: str, *, extra: Optional[Mapping[str, object]] = None) -> LoggerAdapter:
        """Return a logger adapter enriched with execution context observability tags."""

        tags = tuple(self.options.observability_tags)
        return _get_logger(name, tags=tags if tags else None, extra=extra)


def _load_secrets_quietly() -> SecretsBundle:
    try:
        return load_secrets(strict=False)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        _get_logger(__name__).debug("Secrets file unreadable; continuing without credentials", extra={"error": str(exc)})
        return empty_secrets()
