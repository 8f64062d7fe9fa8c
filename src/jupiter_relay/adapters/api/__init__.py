"""
Catalog-driven HTTP adapters for the Jupiter API.

The modules mirror the stages every record passes through:

* :mod:`.parameters` resolves typed values for the active operation;
* :mod:`.requests` builds the outbound :class:`RequestDescriptor`;
* :mod:`.credentials` supplies the optional ``x-api-key`` header;
* :mod:`.base` executes the request over HTTP;
* :mod:`.batch` runs records sequentially under a failure policy.

:class:`JupiterAdapter` wires the stages together for one catalog family.
"""

from .base import DryRunExecutor, HttpExecutor, HttpxExecutor
from .batch import BatchRunner, FailurePolicy, ResultRecord
from .credentials import (
    API_KEY_HEADER,
    Credential,
    CredentialProvider,
    CredentialStore,
    SecretsCredentialStore,
    StaticCredentialStore,
)
from .jupiter import JupiterAdapter
from .parameters import UNSET, ParameterResolver, ParameterSet, ParameterSource, StaticParameters
from .requests import RequestBuilder, RequestDescriptor

__all__ = [
    "API_KEY_HEADER",
    "BatchRunner",
    "Credential",
    "CredentialProvider",
    "CredentialStore",
    "DryRunExecutor",
    "FailurePolicy",
    "HttpExecutor",
    "HttpxExecutor",
    "JupiterAdapter",
    "ParameterResolver",
    "ParameterSet",
    "ParameterSource",
    "RequestBuilder",
    "RequestDescriptor",
    "ResultRecord",
    "SecretsCredentialStore",
    "StaticCredentialStore",
    "StaticParameters",
    "UNSET",
]
