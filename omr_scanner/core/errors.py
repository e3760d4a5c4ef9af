"""Error taxonomy shared by the session, capture and pipeline layers."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    DEVICE_UNAVAILABLE = "device-unavailable"
    ACQUISITION_TIMEOUT = "acquisition-timeout"
    SOURCE_NOT_READY = "source-not-ready"
    FEATURE_UNAVAILABLE = "feature-unavailable"
    UNKNOWN_TEMPLATE = "unknown-template"
    DEGENERATE_CROP = "degenerate-crop"
    ENCODE_FAILURE = "encode-failure"


class ScannerError(RuntimeError):
    """Base class for every failure surfaced to scanner callers."""

    kind: ErrorKind

    def __str__(self) -> str:
        message = super().__str__()
        return f"{self.kind.value}: {message}" if message else self.kind.value


class DeviceUnavailableError(ScannerError):
    """Permission denied, no matching device, or the device failed to open."""

    kind = ErrorKind.DEVICE_UNAVAILABLE


class AcquisitionTimeoutError(ScannerError):
    """The device never delivered a first frame within the readiness timeout."""

    kind = ErrorKind.ACQUISITION_TIMEOUT


class SourceNotReadyError(ScannerError):
    kind = ErrorKind.SOURCE_NOT_READY


class FeatureUnavailableError(ScannerError):
    kind = ErrorKind.FEATURE_UNAVAILABLE


class UnknownTemplateError(ScannerError):
    kind = ErrorKind.UNKNOWN_TEMPLATE


class DegenerateCropError(ScannerError):
    kind = ErrorKind.DEGENERATE_CROP


class EncodeError(ScannerError):
    kind = ErrorKind.ENCODE_FAILURE


_ERRORS_BY_KIND: dict[ErrorKind, type[ScannerError]] = {
    cls.kind: cls
    for cls in (
        DeviceUnavailableError,
        AcquisitionTimeoutError,
        SourceNotReadyError,
        FeatureUnavailableError,
        UnknownTemplateError,
        DegenerateCropError,
        EncodeError,
    )
}


def error_for(kind: ErrorKind, message: str) -> ScannerError:
    """Build the exception matching ``kind``."""
    return _ERRORS_BY_KIND[kind](message)


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
]
