"""Core types: results, errors and configuration."""

from .config import (
    ConfigStore,
    GitFlowSettings,
    HomeConfigStore,
    MemoryConfigStore,
    NotesOptions,
    load_settings,
    load_settings_or_default,
)
from .errors import (
    ConfigurationError,
    ErrorCode,
    GitFlowError,
    PlatformError,
    RecoverableFailure,
    RepositoryError,
    ValidationError,
)
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigStore",
    "GitFlowSettings",
    "HomeConfigStore",
    "MemoryConfigStore",
    "NotesOptions",
    "load_settings",
    "load_settings_or_default",
    # errors
    "ConfigurationError",
    "ErrorCode",
    "GitFlowError",
    "PlatformError",
    "RecoverableFailure",
    "RepositoryError",
    "ValidationError",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
