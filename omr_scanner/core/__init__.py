"""Shared plumbing for the OMR scanner: logging, configuration files, errors."""

from .errors import (
    ErrorKind,
    ScannerError,
    DeviceUnavailableError,
    AcquisitionTimeoutError,
    SourceNotReadyError,
    FeatureUnavailableError,
    UnknownTemplateError,
    DegenerateCropError,
    EncodeError,
    error_for,
)
from .logging_utils import (
    LoggerLike,
    StructuredLogger,
    ensure_structured_logger,
    get_module_logger,
)

__all__ = [
    "ErrorKind",
    "ScannerError",
    "DeviceUnavailableError",
    "AcquisitionTimeoutError",
    "SourceNotReadyError",
    "FeatureUnavailableError",
    "UnknownTemplateError",
    "DegenerateCropError",
    "EncodeError",
    "error_for",
    "LoggerLike",
    "StructuredLogger",
    "ensure_structured_logger",
    "get_module_logger",
]
