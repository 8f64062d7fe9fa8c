"""
Operation catalog declarations and helpers.

A catalog is the static table behind one adapter family: which operations
exist, which endpoint and HTTP method each one maps to, and which parameters
it recognises. Catalogs are authored as YAML documents under
``jupiter_relay/resources/catalogs`` so the tables stay readable next to the
upstream API docs, and are exposed to Python code as frozen dataclasses.

The runtime never mutates a catalog. Adapters load one at construction time
and share it across every record of every batch.
"""

from __future__ import annotations

import json
import string
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import yaml

from ..adapters.base import UnknownOperationError

CATALOG_PACKAGE = "jupiter_relay.resources.catalogs"
FAMILIES: Tuple[str, ...] = ("swap", "price", "token", "trigger", "recurring", "ultra")


class CatalogLoadError(RuntimeError):
    """Raised when a catalog YAML file cannot be parsed or validated."""


class ParameterType(str, Enum):
    """Declared value types. ``options`` values are strings restricted to a choice list."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OPTIONS = "options"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """
    Schema of a single recognised parameter.

    Parameters
    ----------
    name:
        Wire name, used verbatim as query key, body key, or path placeholder.
    type:
        Declared value type.
    default:
        Value substituted when the caller leaves the parameter unset.
    required:
        When ``True`` an absent or empty value is a configuration error.
    is_list:
        Comma-separated list. Split into trimmed tokens when sent in a JSON body.
    operations:
        Operations the parameter applies to. Empty means every operation.
    hide_when:
        Maps another parameter name to values that hide this one, e.g.
        ``{"referralAccount": [""]}``.
    options:
        Allowed choices for ``options`` parameters. Informational only.
    description:
        Human-readable summary.
    """

    name: str
    type: ParameterType = ParameterType.STRING
    default: Any = None
    required: bool = False
    is_list: bool = False
    operations: Tuple[str, ...] = ()
    hide_when: Mapping[str, Tuple[Any, ...]] = field(default_factory=dict)
    options: Tuple[str, ...] = ()
    description: str = ""

    def applies_to(self, operation: str) -> bool:
        return not self.operations or operation in self.operations


@dataclass(frozen=True, slots=True)
class OperationSpec:
    """One named action bound to an endpoint path template and HTTP method."""

    name: str
    path: str
    method: HttpMethod = HttpMethod.GET
    description: str = ""

    @property
    def path_parameters(self) -> Tuple[str, ...]:
        """Placeholder names interpolated into :attr:`path`, in template order."""

        return tuple(field_name for _, field_name, _, _ in string.Formatter().parse(self.path) if field_name)

    @property
    def is_mutating(self) -> bool:
        return self.method == HttpMethod.POST


@dataclass(frozen=True, slots=True)
class OperationCatalog:
    """
    Immutable table of operations and parameter schemas for one adapter family.

    Parameters
    ----------
    family:
        Family identifier, e.g. ``swap`` or ``trigger``.
    base_url:
        Default base URL. Callers may override it per record.
    default_operation:
        Operation used when the caller does not select one.
    operations:
        Ordered mapping of operation name to :class:`OperationSpec`.
    parameters:
        Parameter schemas in declaration order.
    description:
        Short summary of the family.
    """

    family: str
    base_url: str
    default_operation: str
    operations: Mapping[str, OperationSpec]
    parameters: Tuple[ParameterSpec, ...] = ()
    description: str = ""

    def get(self, operation: str) -> Optional[OperationSpec]:
        return self.operations.get(operation)

    def require(self, operation: str) -> OperationSpec:
        """Return the operation spec or raise :class:`UnknownOperationError`."""

        spec = self.operations.get(operation)
        if spec is None:
            raise UnknownOperationError(operation, self.family)
        return spec

    def parameters_for(self, operation: str) -> List[ParameterSpec]:
        """Parameters whose visibility includes ``operation``, in declaration order."""

        return [spec for spec in self.parameters if spec.applies_to(operation)]

    def parameter(self, name: str) -> Optional[ParameterSpec]:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None

    def __iter__(self) -> Iterator[OperationSpec]:
        return iter(self.operations.values())

    def validate(self) -> None:
        """Validate internal consistency of the catalog."""

        if not self.operations:
            raise CatalogLoadError(f"Catalog '{self.family}' declares no operations.")
        if self.default_operation not in self.operations:
            raise CatalogLoadError(f"Catalog '{self.family}' default operation '{self.default_operation}' is not declared.")
        seen: set[str] = set()
        for spec in self.parameters:
            if spec.name in seen:
                raise CatalogLoadError(f"Catalog '{self.family}' declares parameter '{spec.name}' twice.")
            seen.add(spec.name)
            unknown = [name for name in spec.operations if name not in self.operations]
            if unknown:
                raise CatalogLoadError(f"Parameter '{spec.name}' in '{self.family}' references unknown operations: {', '.join(unknown)}.")
        for operation in self.operations.values():
            for placeholder in operation.path_parameters:
                candidate = self.parameter(placeholder)
                if candidate is None or not candidate.applies_to(operation.name):
                    raise CatalogLoadError(f"Path placeholder '{placeholder}' of '{self.family}.{operation.name}' has no matching parameter.")

    def to_json(self) -> str:
        """Return a JSON representation useful for CLI output."""

        payload = {
            "family": self.family,
            "description": self.description,
            "base_url": self.base_url,
            "default_operation": self.default_operation,
            "operations": [
                {
                    "name": operation.name,
                    "method": operation.method.value,
                    "path": operation.path,
                    "description": operation.description,
                    "parameters": [spec.name for spec in self.parameters_for(operation.name)],
                }
                for operation in self.operations.values()
            ],
            "parameters": [
                {
                    "name": spec.name,
                    "type": spec.type.value,
                    "default": spec.default,
                    "required": spec.required,
                    "list": spec.is_list,
                    "operations": list(spec.operations),
                    "options": list(spec.options),
                    "description": spec.description,
                }
                for spec in self.parameters
            ],
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "OperationCatalog":
        """Load a catalog from a YAML document."""

        location = Path(path)
        if not location.exists():
            raise CatalogLoadError(f"Catalog file '{location}' does not exist.")

        try:
            with location.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle)
        except yaml.YAMLError as exc:  # pragma: no cover - depends on PyYAML
            raise CatalogLoadError(f"Failed to parse '{location}': {exc}") from exc

        return cls.from_mapping(payload, origin=str(location))

    @classmethod
    def from_mapping(cls, payload: object, *, origin: str = "<mapping>") -> "OperationCatalog":
        """Build a catalog from an already-parsed mapping."""

        if not isinstance(payload, dict):
            raise CatalogLoadError(f"Catalog '{origin}' must contain a mapping.")

        try:
            operations: Dict[str, OperationSpec] = {}
            for entry in _ensure_entries(payload.get("operations"), origin):
                operation = OperationSpec(
                    name=str(entry["name"]),
                    path=str(entry["path"]),
                    method=HttpMethod(str(entry.get("method", "GET")).upper()),
                    description=str(entry.get("description", "")),
                )
                operations[operation.name] = operation
            parameters = tuple(_parameter_from_payload(entry) for entry in _ensure_entries(payload.get("parameters"), origin))
            catalog = cls(
                family=str(payload["family"]),
                base_url=str(payload["base_url"]),
                default_operation=str(payload.get("default_operation") or next(iter(operations), "")),
                operations=MappingProxyType(operations),
                parameters=parameters,
                description=str(payload.get("description", "")),
            )
        except KeyError as exc:
            raise CatalogLoadError(f"Missing required key {exc!s} in '{origin}'.") from exc
        except ValueError as exc:
            raise CatalogLoadError(f"Invalid field in '{origin}': {exc}") from exc

        catalog.validate()
        return catalog


def _parameter_from_payload(entry: Dict[str, Any]) -> ParameterSpec:
    hide_when_raw = entry.get("hide_when") or {}
    if not isinstance(hide_when_raw, dict):
        raise ValueError(f"hide_when of '{entry.get('name')}' must be a mapping")
    hide_when = MappingProxyType({str(key): tuple(_ensure_list(values)) for key, values in hide_when_raw.items()})
    return ParameterSpec(
        name=str(entry["name"]),
        type=ParameterType(str(entry.get("type", ParameterType.STRING.value))),
        default=entry.get("default"),
        required=bool(entry.get("required", False)),
        is_list=bool(entry.get("list", False)),
        operations=tuple(str(item) for item in _ensure_list(entry.get("operations"))),
        hide_when=hide_when,
        options=tuple(str(item) for item in _ensure_list(entry.get("options"))),
        description=str(entry.get("description", "")),
    )


def _ensure_entries(value: object, origin: str) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise CatalogLoadError(f"Invalid entry list in '{origin}': expected a list of mappings.")
    return value


def _ensure_list(value: object | None) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


@lru_cache(maxsize=None)
def load_catalog(family: str) -> OperationCatalog:
    """Load the packaged catalog for ``family``. Results are cached per process."""

    if family not in FAMILIES:
        raise CatalogLoadError(f"Unknown adapter family '{family}'. Expected one of: {', '.join(FAMILIES)}.")
    with resources.as_file(resources.files(CATALOG_PACKAGE) / f"{family}.yaml") as resolved:
        return OperationCatalog.from_yaml(resolved)


def load_all_catalogs(families: Optional[Sequence[str]] = None) -> List[OperationCatalog]:
    return [load_catalog(family) for family in (families or FAMILIES)]
