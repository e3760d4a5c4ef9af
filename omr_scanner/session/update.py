from dataclasses import replace

from omr_scanner.capture.frame import CaptureMethod

from .state import ACQUIRING_STATES, SessionError, SessionState, SessionStatus
from .actions import (
    Action, StartSession, StopSession, SwitchFacing, ToggleFlash, Shutdown,
    CooldownElapsed, DeviceAcquired, DeviceReady, DeviceFailed, StopCompleted,
    FlashChanged, FlashFailed,
)
from .effects import (
    Effect, ReleaseDevice, Cooldown, AcquireDevice, AwaitFirstFrame, ConfirmStopped,
    ApplyTorch, SendStatus,
)

STARTABLE_STATES = frozenset({SessionStatus.IDLE, SessionStatus.ERROR})


def _released(state: SessionState, status: SessionStatus) -> SessionState:
    """State with the device handle dropped and per-device flags cleared."""
    return replace(
        state,
        status=status,
        device_handle=None,
        flash_enabled=False,
        flash_capable=False,
        flash_pending=False,
        capture_method=None,
        capabilities=None,
    )


def _release_effects(state: SessionState) -> list[Effect]:
    if state.device_handle is None:
        return []
    return [ReleaseDevice(state.device_handle)]


def _is_current(state: SessionState, generation: int) -> bool:
    return generation == state.generation and state.status in ACQUIRING_STATES


def update(state: SessionState, action: Action) -> tuple[SessionState, list[Effect]]:
    match action:
        case StartSession(facing_mode):
            if state.status not in STARTABLE_STATES:
                return state, []
            generation = state.generation + 1
            effects = _release_effects(state)
            effects.append(Cooldown(generation, facing_mode))
            return (
                replace(
                    _released(state, SessionStatus.INITIALIZING),
                    facing_mode=facing_mode,
                    generation=generation,
                    error=None,
                ),
                effects,
            )

        case SwitchFacing():
            if state.status != SessionStatus.ACTIVE or state.is_transitioning:
                return state, []
            generation = state.generation + 1
            effects = _release_effects(state)
            effects.append(Cooldown(generation, state.facing_mode.toggled(), after_switch=True))
            # facing_mode keeps the old value until the new device is ready
            return (
                replace(
                    _released(state, SessionStatus.SWITCHING_FACING),
                    generation=generation,
                ),
                effects,
            )

        case CooldownElapsed(generation, facing_mode):
            if not _is_current(state, generation):
                return state, []
            return state, [AcquireDevice(generation, facing_mode)]

        case DeviceAcquired(generation, handle, facing_mode):
            if not _is_current(state, generation) or state.device_handle is not None:
                # Superseded by a later stop/start: nobody else will free it.
                return state, [ReleaseDevice(handle)]
            return (
                replace(state, device_handle=handle),
                [AwaitFirstFrame(generation, handle, facing_mode)],
            )

        case DeviceReady(generation, facing_mode, capabilities):
            if not _is_current(state, generation) or state.device_handle is None:
                return state, []
            method = (
                CaptureMethod.SNAPSHOT
                if capabilities.supports_snapshot
                else CaptureMethod.STREAM_FALLBACK
            )
            return (
                replace(
                    state,
                    status=SessionStatus.ACTIVE,
                    facing_mode=facing_mode,
                    flash_capable=capabilities.supports_torch,
                    capture_method=method,
                    capabilities=capabilities,
                    error=None,
                ),
                [
                    SendStatus("session_active", {
                        "facing_mode": facing_mode.value,
                        "capture_method": method.value,
                        "flash_capable": capabilities.supports_torch,
                    })
                ],
            )

        case DeviceFailed(generation, kind, message):
            if not _is_current(state, generation):
                return state, []
            effects = _release_effects(state)
            effects.append(SendStatus("session_error", {"kind": kind.value, "message": message}))
            return (
                replace(
                    _released(state, SessionStatus.ERROR),
                    error=SessionError(kind, message),
                ),
                effects,
            )

        case StopSession():
            if state.status in (SessionStatus.IDLE, SessionStatus.STOPPING):
                return state, []
            generation = state.generation + 1
            effects = _release_effects(state)
            effects.append(ConfirmStopped(generation))
            return (
                replace(
                    _released(state, SessionStatus.STOPPING),
                    generation=generation,
                    error=None,
                ),
                effects,
            )

        case StopCompleted(generation):
            if generation != state.generation or state.status != SessionStatus.STOPPING:
                return state, []
            return (
                replace(state, status=SessionStatus.IDLE),
                [SendStatus("session_stopped", {})],
            )

        case Shutdown():
            if state.status == SessionStatus.IDLE and state.device_handle is None:
                return state, []
            effects = _release_effects(state)
            effects.append(SendStatus("session_stopped", {}))
            return (
                replace(
                    _released(state, SessionStatus.IDLE),
                    generation=state.generation + 1,
                    error=None,
                ),
                effects,
            )

        case ToggleFlash():
            if (
                state.status != SessionStatus.ACTIVE
                or state.device_handle is None
                or not state.flash_capable
                or state.is_transitioning
            ):
                return state, []
            return (
                replace(state, flash_pending=True),
                [ApplyTorch(state.device_handle, not state.flash_enabled)],
            )

        case FlashChanged(enabled):
            active = state.status == SessionStatus.ACTIVE
            return (
                replace(state, flash_pending=False, flash_enabled=enabled and active),
                [SendStatus("flash_changed", {"enabled": enabled and active})],
            )

        case FlashFailed():
            return replace(state, flash_pending=False), []

        case _:
            return state, []
