"""
Request construction for catalog-driven operations.

The builder applies the same rules to every family:

* placeholders in the operation path are filled from the parameter set and
  never repeated in the query or body;
* remaining parameters are sent only when truthy, so ``0``, ``False`` and
  ``""`` are indistinguishable from "unset" on the wire;
* GET operations carry parameters in the query string, POST operations in a
  JSON body, where comma-separated list parameters become token arrays.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping
from urllib.parse import quote

from ...core.catalog import HttpMethod, OperationCatalog, OperationSpec
from ..base import ConfigurationError


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """Concrete outbound request for a single record."""

    method: HttpMethod
    url: str
    query: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)

    def with_headers(self, headers: Mapping[str, str]) -> "RequestDescriptor":
        if not headers:
            return self
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)

    def as_dict(self, *, redact_headers: bool = True) -> Dict[str, Any]:
        headers = {key: "***" for key in self.headers} if redact_headers else dict(self.headers)
        return {
            "method": self.method.value,
            "url": self.url,
            "query": dict(self.query),
            "body": dict(self.body),
            "headers": headers,
        }


def split_list(value: str) -> List[str]:
    return [token.strip() for token in value.split(",")]


@dataclass(slots=True)
class RequestBuilder:
    """Map an operation and its resolved parameters to a :class:`RequestDescriptor`."""

    catalog: OperationCatalog

    def build(self, operation: str, parameters: Mapping[str, Any], base_url: str) -> RequestDescriptor:
        spec = self.catalog.require(operation)
        url = f"{base_url.rstrip('/')}{self._render_path(spec, parameters)}"

        placed: Dict[str, Any] = {}
        path_parameters = spec.path_parameters
        for name, value in parameters.items():
            if name in path_parameters or not value:
                continue
            declared = self.catalog.parameter(name)
            if spec.is_mutating and declared is not None and declared.is_list and isinstance(value, str):
                value = split_list(value)
            placed[name] = value

        if spec.is_mutating:
            return RequestDescriptor(method=HttpMethod.POST, url=url, body=placed)
        return RequestDescriptor(method=HttpMethod.GET, url=url, query=placed)

    @staticmethod
    def _render_path(spec: OperationSpec, parameters: Mapping[str, Any]) -> str:
        segments: Dict[str, str] = {}
        for name in spec.path_parameters:
            value = parameters.get(name)
            if value is None or value == "":
                raise ConfigurationError(f"Path parameter '{name}' is required for operation '{spec.name}'.")
            segments[name] = quote(str(value), safe=",")
        return spec.path.format(**segments)
