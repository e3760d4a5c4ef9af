from dataclasses import dataclass
from typing import Any

from omr_scanner.capture.device import DeviceCapabilities, FacingMode
from omr_scanner.core.errors import ErrorKind


@dataclass(frozen=True)
class StartSession:
    facing_mode: FacingMode


@dataclass(frozen=True)
class StopSession:
    pass


@dataclass(frozen=True)
class SwitchFacing:
    pass


@dataclass(frozen=True)
class ToggleFlash:
    pass


@dataclass(frozen=True)
class Shutdown:
    pass


@dataclass(frozen=True)
class CooldownElapsed:
    generation: int
    facing_mode: FacingMode


@dataclass(frozen=True)
class DeviceAcquired:
    generation: int
    handle: Any
    facing_mode: FacingMode


@dataclass(frozen=True)
class DeviceReady:
    generation: int
    facing_mode: FacingMode
    capabilities: DeviceCapabilities


@dataclass(frozen=True)
class DeviceFailed:
    generation: int
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class StopCompleted:
    generation: int


@dataclass(frozen=True)
class FlashChanged:
    enabled: bool


@dataclass(frozen=True)
class FlashFailed:
    message: str


Action = (
    StartSession | StopSession | SwitchFacing | ToggleFlash | Shutdown |
    CooldownElapsed | DeviceAcquired | DeviceReady | DeviceFailed | StopCompleted |
    FlashChanged | FlashFailed
)
