"""
Adapter interfaces for the Jupiter API families.

The error taxonomy lives in :mod:`.base`. Concrete HTTP adapters live in
:mod:`.api` and are imported from there explicitly.
"""

from .base import (
    AdapterError,
    BatchAbortedError,
    ConfigurationError,
    CredentialLookupError,
    HttpError,
    UnknownOperationError,
)

__all__ = [
    "AdapterError",
    "BatchAbortedError",
    "ConfigurationError",
    "CredentialLookupError",
    "HttpError",
    "UnknownOperationError",
]
