"""
Secret management helpers for the Jupiter relay.

Secrets are loaded from ``.secrets/secret.toml`` by default. The lookup order is:

1. Explicit ``JUPITER_SECRETS_PATH`` environment variable.
2. Project-relative ``.secrets/secret.toml`` (both from CWD and the package root).
3. Project-relative ``.secrets/secrets.toml``.
4. Fallback to ``.secrets/secrets.example.toml`` for scaffolding values.

The Jupiter section looks like::

    [jupiter]
    api_key = "..."

    [jupiter.base_urls]
    swap = "https://api.jup.ag/swap/v1"

``JUPITER_API_KEY`` overrides the file value when set.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

ENV_SECRETS_PATH = "JUPITER_SECRETS_PATH"
ENV_API_KEY = "JUPITER_API_KEY"


@dataclass(slots=True)
class JupiterSettings:
    """Credential and endpoint overrides for the Jupiter API."""

    api_key: Optional[str] = None
    base_urls: Mapping[str, str] = field(default_factory=dict)

    def resolve_base_url(self, family: str, default: str) -> str:
        """Return the configured base URL for ``family`` or ``default``."""

        return self.base_urls.get(family) or default


@dataclass(slots=True)
class SecretsBundle:
    """Lightweight container for parsed secret values."""

    source_path: Optional[Path]
    data: Dict[str, Dict[str, object]]
    jupiter: JupiterSettings = field(default_factory=JupiterSettings)


def _discover_project_root() -> Optional[Path]:
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").is_file():
            return parent
    return None


def _candidate_paths() -> Iterable[Path]:
    env_override = os.getenv(ENV_SECRETS_PATH)
    if env_override:
        yield Path(env_override).expanduser()

    def secrets_paths(base: Path) -> Iterable[Path]:
        secrets_dir = base / ".secrets"
        for filename in ("secret.toml", "secrets.toml", "secrets.example.toml"):
            yield secrets_dir / filename

    search_roots = [Path.cwd()]
    package_root = _discover_project_root()
    if package_root and package_root not in search_roots:
        search_roots.append(package_root)

    seen: set[Path] = set()
    for base in search_roots:
        for candidate in secrets_paths(base):
            if candidate not in seen:
                seen.add(candidate)
                yield candidate


def _load_toml(path: Path) -> Dict[str, Dict[str, object]]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _extract_jupiter_settings(raw: Dict[str, Dict[str, object]]) -> JupiterSettings:
    section = raw.get("jupiter", {}) if isinstance(raw, dict) else {}
    if not isinstance(section, dict):
        section = {}

    api_key = section.get("api_key")
    if not isinstance(api_key, str) or not api_key:
        api_key = None
    env_key = os.getenv(ENV_API_KEY)
    if env_key:
        api_key = env_key

    base_urls: Dict[str, str] = {}
    overrides = section.get("base_urls")
    if isinstance(overrides, dict):
        base_urls = {str(key): str(value) for key, value in overrides.items() if isinstance(value, str) and value}

    return JupiterSettings(api_key=api_key, base_urls=base_urls)


def load_secrets(strict: bool = False) -> SecretsBundle:
    """
    Attempt to load secrets from the configured locations.

    Parameters
    ----------
    strict:
        When ``True`` the function raises ``FileNotFoundError`` if no secrets file is
        discovered. Defaults to ``False`` because the Jupiter lite endpoints work
        without a key.
    """

    for path in _candidate_paths():
        if path.is_file():
            data = _load_toml(path)
            return SecretsBundle(source_path=path, data=data, jupiter=_extract_jupiter_settings(data))

    if strict:
        raise FileNotFoundError(f"No secrets file found. Configure {ENV_SECRETS_PATH} or .secrets/secret.toml.")

    return empty_secrets()


def empty_secrets() -> SecretsBundle:
    """Bundle used when no secrets file applies. ``JUPITER_API_KEY`` is still honoured."""

    return SecretsBundle(source_path=None, data={}, jupiter=_extract_jupiter_settings({}))
