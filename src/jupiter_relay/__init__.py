"""
Declarative relay for the Jupiter token-swap REST API.

Import :class:`JupiterAdapter` for the developer-facing surface and pick a
family with :meth:`JupiterAdapter.for_family`.
"""

from .adapters import AdapterError, BatchAbortedError, ConfigurationError, HttpError, UnknownOperationError
from .adapters.api import FailurePolicy, JupiterAdapter, RequestDescriptor, ResultRecord
from .core import FAMILIES, OperationCatalog, load_catalog

__all__ = [
    "AdapterError",
    "BatchAbortedError",
    "ConfigurationError",
    "FAMILIES",
    "FailurePolicy",
    "HttpError",
    "JupiterAdapter",
    "OperationCatalog",
    "RequestDescriptor",
    "ResultRecord",
    "UnknownOperationError",
    "load_catalog",
]
