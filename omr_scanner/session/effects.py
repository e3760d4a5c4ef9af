from dataclasses import dataclass
from typing import Any

from omr_scanner.capture.device import FacingMode


@dataclass(frozen=True)
class ReleaseDevice:
    handle: Any


@dataclass(frozen=True)
class Cooldown:
    generation: int
    facing_mode: FacingMode
    after_switch: bool = False


@dataclass(frozen=True)
class AcquireDevice:
    generation: int
    facing_mode: FacingMode


@dataclass(frozen=True)
class AwaitFirstFrame:
    generation: int
    handle: Any
    facing_mode: FacingMode


@dataclass(frozen=True)
class ConfirmStopped:
    generation: int


@dataclass(frozen=True)
class ApplyTorch:
    handle: Any
    enabled: bool


@dataclass(frozen=True)
class SendStatus:
    status_type: str
    payload: dict


Effect = (
    ReleaseDevice | Cooldown | AcquireDevice | AwaitFirstFrame | ConfirmStopped |
    ApplyTorch | SendStatus
)
