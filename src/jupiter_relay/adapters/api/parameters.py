"""
Per-record parameter resolution.

Callers configure an adapter with a :class:`ParameterSource`: a lookup from
parameter name to either a constant or a callable receiving the record index.
The resolver turns that configuration into the :data:`ParameterSet` for a
single record, restricted to the parameters the active operation recognises,
with catalog defaults filled in and values coerced to their declared types.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Protocol, runtime_checkable

from ...core.catalog import OperationCatalog, ParameterSpec, ParameterType
from ..base import ConfigurationError

OPERATION_KEY = "operation"
BASE_URL_KEY = "baseUrl"

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})

ParameterSet = Dict[str, Any]
UNSET: Any = object()


@runtime_checkable
class ParameterSource(Protocol):
    """Supplies raw parameter values per record. Returns :data:`UNSET` for absent names."""

    def get(self, name: str, index: int) -> Any:
        ...


@dataclass(slots=True)
class StaticParameters:
    """
    Parameter source backed by a mapping.

    Values may be constants, applied to every record, or callables taking the
    record index, which lets one adapter configuration vary per record.
    """

    values: Mapping[str, Any | Callable[[int], Any]] = field(default_factory=dict)

    def get(self, name: str, index: int) -> Any:
        if name not in self.values:
            return UNSET
        value = self.values[name]
        if callable(value):
            return value(index)
        return value


def as_parameter_source(parameters: ParameterSource | Mapping[str, Any] | None) -> ParameterSource:
    if parameters is None:
        return StaticParameters()
    if isinstance(parameters, Mapping):
        return StaticParameters(parameters)
    if isinstance(parameters, ParameterSource):
        return parameters
    raise TypeError(f"Unsupported parameter source: {type(parameters)!r}")


def coerce_value(spec: ParameterSpec, value: Any) -> Any:
    """Coerce ``value`` to the type declared by ``spec``."""

    if value is None:
        return None

    if spec.type == ParameterType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS or not lowered:
                return False
        raise ConfigurationError(f"Parameter '{spec.name}' expects a boolean, got {value!r}.")

    if spec.type == ParameterType.NUMBER:
        if isinstance(value, bool):
            raise ConfigurationError(f"Parameter '{spec.name}' expects a number, got {value!r}.")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                pass
            else:
                if math.isfinite(number):
                    return number
        raise ConfigurationError(f"Parameter '{spec.name}' expects a number, got {value!r}.")

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)) and spec.is_list:
        return ",".join(str(item) for item in value)
    raise ConfigurationError(f"Parameter '{spec.name}' expects text, got {type(value).__name__}.")


def _is_empty(value: Any) -> bool:
    return value is None or value is UNSET or (isinstance(value, str) and not value.strip())


@dataclass(slots=True)
class ParameterResolver:
    """Resolve typed parameter values for one record and one operation."""

    source: ParameterSource

    def resolve_operation(self, index: int, catalog: OperationCatalog) -> str:
        raw = self.source.get(OPERATION_KEY, index)
        if _is_empty(raw):
            return catalog.default_operation
        return str(raw)

    def resolve_base_url(self, index: int, default: str) -> str:
        raw = self.source.get(BASE_URL_KEY, index)
        if _is_empty(raw):
            return default
        return str(raw)

    def resolve(self, index: int, operation: str, catalog: OperationCatalog) -> ParameterSet:
        """
        Build the parameter set for ``operation`` at record ``index``.

        Unset parameters take the catalog default. A value that is explicitly
        falsy (``0``, ``False``, ``""``) counts as set and is kept as is.

        Raises
        ------
        UnknownOperationError
            When ``operation`` is not declared by ``catalog``.
        ConfigurationError
            When a required parameter is empty or a value has the wrong type.
        """

        catalog.require(operation)
        visible = catalog.parameters_for(operation)

        resolved: ParameterSet = {}
        for spec in visible:
            raw = self.source.get(spec.name, index)
            value = spec.default if raw is UNSET else coerce_value(spec, raw)
            if value is not None:
                resolved[spec.name] = value

        for spec in visible:
            if spec.hide_when and self._is_hidden(spec, resolved, index, catalog):
                resolved.pop(spec.name, None)
                continue
            if spec.required and _is_empty(resolved.get(spec.name)):
                raise ConfigurationError(f"Parameter '{spec.name}' is required for operation '{operation}'.")

        return resolved

    def _is_hidden(self, spec: ParameterSpec, resolved: ParameterSet, index: int, catalog: OperationCatalog) -> bool:
        for other, hiding_values in spec.hide_when.items():
            if other in resolved:
                current = resolved[other]
            else:
                raw = self.source.get(other, index)
                other_spec = catalog.parameter(other)
                current = other_spec.default if raw is UNSET and other_spec else raw
            if current in hiding_values or (current is None and "" in hiding_values):
                return True
        return False
