"""
Catalog-driven adapter for the Jupiter API families.

One :class:`JupiterAdapter` class serves all six families (swap, price,
token, trigger, recurring, ultra). The family only decides which
:class:`~jupiter_relay.core.catalog.OperationCatalog` is loaded. Dispatch,
request construction, credential injection, execution and failure handling
are shared.

Example
-------
>>> adapter = JupiterAdapter.for_family("swap")
>>> results = adapter.run(
...     [{}],
...     {"operation": "quote", "inputMint": "So111...", "outputMint": "EPjF...", "amount": "1000000"},
... )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ...core.catalog import OperationCatalog, load_catalog
from ...core.logging import bind_tags, get_logger, log_separator
from ..base import BatchAbortedError
from .base import HttpExecutor, HttpxExecutor
from .batch import BatchRunner, FailurePolicy, ResultRecord
from .credentials import CredentialProvider
from .parameters import OPERATION_KEY, ParameterResolver, ParameterSource, as_parameter_source
from .requests import RequestBuilder, RequestDescriptor


@dataclass(slots=True)
class JupiterAdapter:
    """
    Relay input records to one Jupiter API family.

    Parameters
    ----------
    catalog:
        Operation table for the family.
    executor:
        HTTP executor. Defaults to :class:`HttpxExecutor`.
    credentials:
        Credential provider. The default has no store and sends no key.
    base_url:
        Base URL override. A ``baseUrl`` parameter still takes precedence per record.
    """

    catalog: OperationCatalog
    executor: HttpExecutor = field(default_factory=HttpxExecutor)
    credentials: CredentialProvider = field(default_factory=CredentialProvider)
    base_url: Optional[str] = None
    logger: LoggerAdapter = field(init=False, repr=False)
    builder: RequestBuilder = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = bind_tags(get_logger(__name__, extra={"family": self.catalog.family}), [f"jupiter.{self.catalog.family}"])
        self.builder = RequestBuilder(self.catalog)

    @classmethod
    def for_family(cls, family: str, **kwargs: Any) -> "JupiterAdapter":
        """Construct an adapter for one of the packaged catalog families."""

        return cls(catalog=load_catalog(family), **kwargs)

    @property
    def family(self) -> str:
        return self.catalog.family

    @property
    def default_base_url(self) -> str:
        return self.base_url or self.catalog.base_url

    def build_request(
        self,
        index: int,
        resolver: ParameterResolver,
        headers: Optional[Mapping[str, str]] = None,
    ) -> RequestDescriptor:
        """Resolve, build and authenticate the request for record ``index``."""

        operation = resolver.resolve_operation(index, self.catalog)
        parameters = resolver.resolve(index, operation, self.catalog)
        base_url = resolver.resolve_base_url(index, self.default_base_url)
        request = self.builder.build(operation, parameters, base_url)
        return request.with_headers(headers or {})

    def plan(
        self,
        records: Iterable[Any],
        parameters: ParameterSource | Mapping[str, Any] | None = None,
    ) -> List[RequestDescriptor]:
        """Build every request descriptor without executing any of them. Fails fast."""

        resolver = ParameterResolver(as_parameter_source(parameters))
        headers = self.credentials.headers()
        return [self.build_request(index, resolver, headers) for index, _ in enumerate(records)]

    def run(
        self,
        records: Iterable[Any],
        parameters: ParameterSource | Mapping[str, Any] | None = None,
        *,
        continue_on_fail: bool = False,
    ) -> List[ResultRecord]:
        """
        Process ``records`` in order and return one result per record.

        The credential is looked up once per call. With ``continue_on_fail``
        failed records become error records. Otherwise the first failure raises
        :class:`~jupiter_relay.adapters.base.BatchAbortedError`.
        """

        resolver = ParameterResolver(as_parameter_source(parameters))
        headers = self.credentials.headers()
        runner = BatchRunner(FailurePolicy.from_flag(continue_on_fail), logger=self.logger)
        log_separator(self.logger, title=f"jupiter {self.family}")

        def step(index: int) -> Any:
            request = self.build_request(index, resolver, headers)
            return self.executor.execute(request)

        return runner.run(records, step)

    def call(self, operation: str, **parameters: Any) -> Any:
        """Execute a single operation and return its payload, raising on failure."""

        values: Dict[str, Any] = dict(parameters)
        values[OPERATION_KEY] = operation
        try:
            results = self.run([None], values)
        except BatchAbortedError as exc:
            raise exc.error from None
        return results[0].payload
