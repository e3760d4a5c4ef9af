"""Camera capture and answer-sheet region extraction for OMR scanning."""

from __future__ import annotations

from importlib import metadata

from .core.errors import ErrorKind, ScannerError
from .templates import Template, TemplateRegistry, default_registry, get_template

try:
    __version__ = metadata.version("omr-scanner")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


__all__ = [
    "__version__",
    "ErrorKind",
    "ScannerError",
    "Template",
    "TemplateRegistry",
    "default_registry",
    "get_template",
]
