"""Typed configuration for the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from omr_scanner.capture.device import CaptureConstraints, FacingMode
from omr_scanner.core.config_manager import ConfigManager
from omr_scanner.core.logging_utils import LoggerLike, ensure_structured_logger
from omr_scanner.templates import DEFAULT_TEMPLATE_ID

Resolution = Tuple[int, int]

DEFAULT_START_COOLDOWN_S = 0.5
DEFAULT_SWITCH_COOLDOWN_S = 0.8
DEFAULT_READY_TIMEOUT_S = 15.0
DEFAULT_FACING = FacingMode.REAR
DEFAULT_MIN_RESOLUTION: Resolution = (1920, 1080)
DEFAULT_IDEAL_RESOLUTION: Resolution = (3840, 2160)
DEFAULT_MAX_RESOLUTION: Resolution = (4096, 4096)
DEFAULT_IDEAL_FPS = 30
DEFAULT_MAX_FPS = 60
DEFAULT_ASPECT_RATIO = 9 / 16
DEFAULT_SNAPSHOT_SIZE: Resolution = (4096, 4096)
DEFAULT_REAR_DEVICE = 0
DEFAULT_FRONT_DEVICE = 1
DEFAULT_OUTPUT_DIR = Path("./scans")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = Path("./logs/omr_scanner.log")


@dataclass(slots=True)
class SessionSettings:
    start_cooldown_s: float = DEFAULT_START_COOLDOWN_S
    switch_cooldown_s: float = DEFAULT_SWITCH_COOLDOWN_S
    ready_timeout_s: float = DEFAULT_READY_TIMEOUT_S
    default_facing: FacingMode = DEFAULT_FACING


@dataclass(slots=True)
class CaptureSettings:
    min_resolution: Resolution = DEFAULT_MIN_RESOLUTION
    ideal_resolution: Resolution = DEFAULT_IDEAL_RESOLUTION
    max_resolution: Resolution = DEFAULT_MAX_RESOLUTION
    ideal_fps: int = DEFAULT_IDEAL_FPS
    max_fps: int = DEFAULT_MAX_FPS
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    snapshot_size: Resolution = DEFAULT_SNAPSHOT_SIZE
    rear_device: int = DEFAULT_REAR_DEVICE
    front_device: int = DEFAULT_FRONT_DEVICE

    def constraints_for(self, facing_mode: FacingMode) -> CaptureConstraints:
        return CaptureConstraints.for_facing(
            facing_mode,
            min_resolution=self.min_resolution,
            ideal_resolution=self.ideal_resolution,
            max_resolution=self.max_resolution,
            ideal_fps=self.ideal_fps,
            max_fps=self.max_fps,
            aspect_ratio=self.aspect_ratio,
        )

    @property
    def facing_indices(self) -> Dict[FacingMode, int]:
        return {FacingMode.REAR: self.rear_device, FacingMode.FRONT: self.front_device}


@dataclass(slots=True)
class OutputSettings:
    directory: Path = DEFAULT_OUTPUT_DIR
    default_template: str = DEFAULT_TEMPLATE_ID


@dataclass(slots=True)
class LoggingSettings:
    level: str = DEFAULT_LOG_LEVEL
    file: Optional[Path] = DEFAULT_LOG_FILE


@dataclass(slots=True)
class ScannerConfig:
    session: SessionSettings = field(default_factory=SessionSettings)
    capture: CaptureSettings = field(default_factory=CaptureSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Public API


def load_config(
    data: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    logger: LoggerLike = None,
) -> ScannerConfig:
    """Build a typed config from flat ``section.key`` data plus optional overrides."""

    log = ensure_structured_logger(logger, fallback_name=__name__)
    merged: Dict[str, Any] = dict(data or {})
    if overrides:
        for key, value in overrides.items():
            if value is not None:
                merged[key] = value

    session = SessionSettings(
        start_cooldown_s=_coerce_float(merged, ("session.start_cooldown_s",), DEFAULT_START_COOLDOWN_S, log),
        switch_cooldown_s=_coerce_float(merged, ("session.switch_cooldown_s",), DEFAULT_SWITCH_COOLDOWN_S, log),
        ready_timeout_s=_coerce_float(merged, ("session.ready_timeout_s",), DEFAULT_READY_TIMEOUT_S, log),
        default_facing=_coerce_facing(merged, ("session.default_facing", "facing"), DEFAULT_FACING, log),
    )

    capture = CaptureSettings(
        min_resolution=_coerce_resolution(merged, ("capture.min_resolution",), DEFAULT_MIN_RESOLUTION, log),
        ideal_resolution=_coerce_resolution(merged, ("capture.ideal_resolution",), DEFAULT_IDEAL_RESOLUTION, log),
        max_resolution=_coerce_resolution(merged, ("capture.max_resolution",), DEFAULT_MAX_RESOLUTION, log),
        ideal_fps=_coerce_int(merged, ("capture.ideal_fps",), DEFAULT_IDEAL_FPS, log),
        max_fps=_coerce_int(merged, ("capture.max_fps",), DEFAULT_MAX_FPS, log),
        aspect_ratio=_coerce_float(merged, ("capture.aspect_ratio",), DEFAULT_ASPECT_RATIO, log),
        snapshot_size=_coerce_resolution(merged, ("capture.snapshot_size",), DEFAULT_SNAPSHOT_SIZE, log),
        rear_device=_coerce_int(merged, ("capture.rear_device",), DEFAULT_REAR_DEVICE, log),
        front_device=_coerce_int(merged, ("capture.front_device",), DEFAULT_FRONT_DEVICE, log),
    )

    output = OutputSettings(
        directory=_coerce_path(merged, ("output.directory", "output_dir"), DEFAULT_OUTPUT_DIR),
        default_template=_coerce_str(merged, ("output.default_template", "template"), DEFAULT_TEMPLATE_ID),
    )

    logging_settings = LoggingSettings(
        level=_coerce_str(merged, ("logging.level", "log_level"), DEFAULT_LOG_LEVEL),
        file=_coerce_optional_path(merged, ("logging.file", "log_file"), DEFAULT_LOG_FILE),
    )

    return ScannerConfig(
        session=session,
        capture=capture,
        output=output,
        logging=logging_settings,
    )


def load_config_file(
    path: Path,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    logger: LoggerLike = None,
) -> ScannerConfig:
    data = ConfigManager(logger=logger).read_config(path)
    return load_config(data, overrides, logger=logger)


async def load_config_file_async(
    path: Path,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    logger: LoggerLike = None,
) -> ScannerConfig:
    data = await ConfigManager(logger=logger).read_config_async(path)
    return load_config(data, overrides, logger=logger)


# ---------------------------------------------------------------------------
# Internal helpers


def _first_present(data: Mapping[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if key in data:
            value = data[key]
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            return value
    return None


def _coerce_str(data: Mapping[str, Any], keys: Tuple[str, ...], default: str) -> str:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    return str(raw).strip()


def _coerce_int(data: Mapping[str, Any], keys: Tuple[str, ...], default: int, logger) -> int:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.warning("Invalid integer for %s: %r, using %s", keys[0], raw, default)
        return default


def _coerce_float(data: Mapping[str, Any], keys: Tuple[str, ...], default: float, logger) -> float:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    text = str(raw).strip()
    try:
        if "/" in text:
            numerator, denominator = text.split("/", 1)
            return float(numerator) / float(denominator)
        return float(text)
    except (ValueError, ZeroDivisionError):
        logger.warning("Invalid number for %s: %r, using %s", keys[0], raw, default)
        return default


def _coerce_resolution(
    data: Mapping[str, Any],
    keys: Tuple[str, ...],
    default: Resolution,
    logger,
) -> Resolution:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    if isinstance(raw, (tuple, list)) and len(raw) == 2:
        try:
            return int(raw[0]), int(raw[1])
        except (TypeError, ValueError):
            logger.warning("Invalid resolution for %s: %r, using %s", keys[0], raw, default)
            return default
    text = str(raw).lower().replace(" ", "")
    if "x" in text:
        width_str, height_str = text.split("x", 1)
        try:
            width, height = int(width_str), int(height_str)
        except ValueError:
            width = height = 0
        if width > 0 and height > 0:
            return width, height
    logger.warning("Invalid resolution for %s: %r, using %s", keys[0], raw, default)
    return default


def _coerce_facing(
    data: Mapping[str, Any],
    keys: Tuple[str, ...],
    default: FacingMode,
    logger,
) -> FacingMode:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    if isinstance(raw, FacingMode):
        return raw
    text = str(raw).strip().lower()
    # Browser-style names used by mobile camera APIs
    aliases = {"environment": "rear", "back": "rear", "user": "front"}
    try:
        return FacingMode(aliases.get(text, text))
    except ValueError:
        logger.warning("Invalid facing mode for %s: %r, using %s", keys[0], raw, default.value)
        return default


def _coerce_path(data: Mapping[str, Any], keys: Tuple[str, ...], default: Path) -> Path:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    return Path(str(raw)).expanduser()


def _coerce_optional_path(
    data: Mapping[str, Any],
    keys: Tuple[str, ...],
    default: Optional[Path],
) -> Optional[Path]:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    text = str(raw).strip()
    if text.lower() in {"none", "off", "false"}:
        return None
    return Path(text).expanduser()


__all__ = [
    "CaptureSettings",
    "LoggingSettings",
    "OutputSettings",
    "ScannerConfig",
    "SessionSettings",
    "load_config",
    "load_config_file",
    "load_config_file_async",
]
