from .state import ACQUIRING_STATES, SessionError, SessionState, SessionStatus, initial_state
from .actions import (
    Action, StartSession, StopSession, SwitchFacing, ToggleFlash, Shutdown,
    CooldownElapsed, DeviceAcquired, DeviceReady, DeviceFailed, StopCompleted,
    FlashChanged, FlashFailed,
)
from .effects import (
    Effect, ReleaseDevice, Cooldown, AcquireDevice, AwaitFirstFrame, ConfirmStopped,
    ApplyTorch, SendStatus,
)
from .update import STARTABLE_STATES, update
from .store import Store, create_store
from .executor import EffectExecutor
from .manager import CaptureSessionManager

__all__ = [
    "ACQUIRING_STATES", "STARTABLE_STATES",
    "SessionError", "SessionState", "SessionStatus", "initial_state",
    "Action", "StartSession", "StopSession", "SwitchFacing", "ToggleFlash", "Shutdown",
    "CooldownElapsed", "DeviceAcquired", "DeviceReady", "DeviceFailed", "StopCompleted",
    "FlashChanged", "FlashFailed",
    "Effect", "ReleaseDevice", "Cooldown", "AcquireDevice", "AwaitFirstFrame",
    "ConfirmStopped", "ApplyTorch", "SendStatus",
    "update", "Store", "create_store", "EffectExecutor", "CaptureSessionManager",
]
