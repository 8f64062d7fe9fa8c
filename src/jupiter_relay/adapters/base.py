"""
Error taxonomy shared by the Jupiter adapters.

Every failure that may occur while turning one input record into one request
derives from :class:`AdapterError`. The batch runner catches exactly that base
class, so anything else escaping an adapter is a programming error and
propagates unchanged.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .api.batch import ResultRecord


class AdapterError(RuntimeError):
    """Raised when an adapter encounters a non-recoverable error."""


class ConfigurationError(AdapterError):
    """A required parameter is missing or a value cannot be coerced to its declared type."""


class UnknownOperationError(AdapterError):
    """The selected operation is not declared in the adapter's catalog."""

    def __init__(self, operation: str, family: Optional[str] = None) -> None:
        self.operation = operation
        self.family = family
        scope = f" for '{family}'" if family else ""
        super().__init__(f"Unknown operation{scope}: {operation}")


class HttpError(AdapterError):
    """The HTTP executor reported a failed call."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CredentialLookupError(AdapterError):
    """A credential store could not be read. Never surfaces past the credential provider."""


class BatchAbortedError(AdapterError):
    """
    Raised when a batch running under the abort policy hits a failing record.

    Attributes
    ----------
    record_index:
        Zero-based index of the record that failed.
    results:
        Records appended before the failure. The failing record has no entry.
    """

    def __init__(self, record_index: int, error: AdapterError, results: Sequence["ResultRecord"] = ()) -> None:
        super().__init__(f"{error} [record {record_index}]")
        self.record_index = record_index
        self.error = error
        self.results: List["ResultRecord"] = list(results)
