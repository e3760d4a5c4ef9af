"""Contract for the injected camera collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

import numpy as np

Resolution = tuple[int, int]


class DeviceError(Exception):
    """Raised by a capture device when an operation cannot be carried out."""


class FacingMode(Enum):
    FRONT = "front"
    REAR = "rear"

    def toggled(self) -> "FacingMode":
        return FacingMode.FRONT if self is FacingMode.REAR else FacingMode.REAR


@dataclass(frozen=True)
class DeviceDescriptor:
    device_id: str
    label: str
    facing: Optional[FacingMode] = None


@dataclass(frozen=True)
class CaptureConstraints:
    """Acquisition preferences: width/height bounds, frame rate and focus."""

    facing_mode: FacingMode = FacingMode.REAR
    min_resolution: Resolution = (1920, 1080)
    ideal_resolution: Resolution = (3840, 2160)
    max_resolution: Resolution = (4096, 4096)
    ideal_fps: int = 30
    max_fps: int = 60
    aspect_ratio: float = 9 / 16
    continuous_focus: bool = True

    @classmethod
    def for_facing(cls, facing_mode: FacingMode, **overrides: Any) -> "CaptureConstraints":
        # Front cameras are usually fixed-focus; only ask the rear one.
        overrides.setdefault("continuous_focus", facing_mode is FacingMode.REAR)
        return cls(facing_mode=facing_mode, **overrides)


@dataclass(frozen=True)
class DeviceCapabilities:
    supports_torch: bool = False
    supports_snapshot: bool = False
    native_resolution: Optional[Resolution] = None
    max_resolution: Optional[Resolution] = None


class CaptureDevice(Protocol):
    """Camera collaborator the session drives.

    Handles are opaque to the session. Every failure is reported by raising
    :class:`DeviceError`.
    """

    async def enumerate(self) -> list[DeviceDescriptor]: ...

    async def acquire(self, constraints: CaptureConstraints) -> Any: ...

    async def wait_ready(self, handle: Any) -> None:
        """Resolve once the first frame has been decoded."""
        ...

    async def release(self, handle: Any) -> None: ...

    async def apply_constraint(self, handle: Any, name: str, value: Any) -> None: ...

    def capabilities(self, handle: Any) -> DeviceCapabilities: ...

    async def take_photo(self, handle: Any, max_size: Resolution) -> np.ndarray:
        """Single-shot high-resolution capture, returned as an RGBA array."""
        ...

    def read_frame(self, handle: Any) -> Optional[np.ndarray]:
        """Latest decoded video frame as an RGBA array, or None before the first one."""
        ...


__all__ = [
    "CaptureConstraints",
    "CaptureDevice",
    "DeviceCapabilities",
    "DeviceDescriptor",
    "DeviceError",
    "FacingMode",
    "Resolution",
]
