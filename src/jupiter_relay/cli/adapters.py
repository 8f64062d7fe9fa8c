"""
Helpers for resolving family adapters in CLI contexts.
"""

from __future__ import annotations

from ..adapters.api import CredentialProvider, DryRunExecutor, HttpExecutor, HttpxExecutor, JupiterAdapter, SecretsCredentialStore
from ..core.catalog import load_catalog
from ..core.context import ExecutionContext


def resolve_adapter(family: str, context: ExecutionContext) -> JupiterAdapter:
    """
    Build the adapter for ``family`` from the execution context.

    The API key and per-family base URL overrides come from the context's
    secrets bundle. Dry-run mode swaps in an executor that never sends requests.
    """

    catalog = load_catalog(family)
    executor: HttpExecutor
    if context.options.dry_run:
        executor = DryRunExecutor()
    else:
        executor = HttpxExecutor(timeout=context.options.timeout)
    credentials = CredentialProvider(
        store=SecretsCredentialStore(bundle=context.secrets),
        logger=context.get_logger("jupiter_relay.credentials"),
    )
    base_url = context.secrets.jupiter.resolve_base_url(family, catalog.base_url)
    return JupiterAdapter(catalog=catalog, executor=executor, credentials=credentials, base_url=base_url)
