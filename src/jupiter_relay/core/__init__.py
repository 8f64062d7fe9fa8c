"""
Core infrastructure shared by the Jupiter adapters: operation catalogs,
execution context and logging helpers.
"""

from .catalog import (
    FAMILIES,
    CatalogLoadError,
    HttpMethod,
    OperationCatalog,
    OperationSpec,
    ParameterSpec,
    ParameterType,
    load_all_catalogs,
    load_catalog,
)
from .context import ExecutionContext, ExecutionOptions
from .logging import bind_tags, configure_logging, get_logger, log_progress, log_separator

__all__ = [
    "FAMILIES",
    "CatalogLoadError",
    "ExecutionContext",
    "ExecutionOptions",
    "HttpMethod",
    "OperationCatalog",
    "OperationSpec",
    "ParameterSpec",
    "ParameterType",
    "bind_tags",
    "configure_logging",
    "get_logger",
    "load_all_catalogs",
    "load_catalog",
    "log_progress",
    "log_separator",
]
