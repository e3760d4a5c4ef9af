from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from omr_scanner.capture.device import DeviceCapabilities, FacingMode
from omr_scanner.capture.frame import CaptureMethod
from omr_scanner.core.errors import ErrorKind


class SessionStatus(Enum):
    IDLE = auto()
    INITIALIZING = auto()
    ACTIVE = auto()
    SWITCHING_FACING = auto()
    STOPPING = auto()
    ERROR = auto()


# States in which a device acquisition may be in flight
ACQUIRING_STATES = frozenset({SessionStatus.INITIALIZING, SessionStatus.SWITCHING_FACING})


@dataclass(frozen=True)
class SessionError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus = SessionStatus.IDLE
    facing_mode: FacingMode = FacingMode.REAR
    flash_enabled: bool = False
    flash_capable: bool = False
    flash_pending: bool = False
    device_handle: Any = None
    capture_method: CaptureMethod | None = None
    capabilities: DeviceCapabilities | None = None
    generation: int = 0
    error: SessionError | None = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE and self.device_handle is not None

    @property
    def is_transitioning(self) -> bool:
        """True while a lifecycle operation holds the device handle."""
        return (
            self.flash_pending
            or self.status in ACQUIRING_STATES
            or self.status == SessionStatus.STOPPING
        )


def initial_state(facing_mode: FacingMode = FacingMode.REAR) -> SessionState:
    return SessionState(facing_mode=facing_mode)
