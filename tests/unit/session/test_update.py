import pytest

from omr_scanner.capture.device import DeviceCapabilities, FacingMode
from omr_scanner.capture.frame import CaptureMethod
from omr_scanner.core.errors import ErrorKind
from omr_scanner.session import (
    SessionState, SessionStatus, SessionError,
    update,
    StartSession, StopSession, SwitchFacing, ToggleFlash, Shutdown,
    CooldownElapsed, DeviceAcquired, DeviceReady, DeviceFailed, StopCompleted,
    FlashChanged, FlashFailed,
    ReleaseDevice, Cooldown, AcquireDevice, AwaitFirstFrame, ConfirmStopped,
    ApplyTorch, SendStatus,
)

HANDLE = object()
OTHER_HANDLE = object()


def active_state(**overrides) -> SessionState:
    values = dict(
        status=SessionStatus.ACTIVE,
        facing_mode=FacingMode.REAR,
        device_handle=HANDLE,
        flash_capable=True,
        capture_method=CaptureMethod.STREAM_FALLBACK,
        capabilities=DeviceCapabilities(supports_torch=True),
        generation=3,
    )
    values.update(overrides)
    return SessionState(**values)


class TestStartSession:
    def test_from_idle_transitions_to_initializing(self):
        state = SessionState()
        new_state, effects = update(state, StartSession(FacingMode.FRONT))

        assert new_state.status == SessionStatus.INITIALIZING
        assert new_state.facing_mode == FacingMode.FRONT
        assert new_state.generation == 1
        assert effects == [Cooldown(1, FacingMode.FRONT)]

    def test_from_error_clears_error(self):
        state = SessionState(
            status=SessionStatus.ERROR,
            generation=4,
            error=SessionError(ErrorKind.DEVICE_UNAVAILABLE, "denied"),
        )
        new_state, effects = update(state, StartSession(FacingMode.REAR))

        assert new_state.status == SessionStatus.INITIALIZING
        assert new_state.error is None
        assert new_state.generation == 5
        assert isinstance(effects[-1], Cooldown)

    def test_releases_stray_handle_before_cooldown(self):
        state = SessionState(status=SessionStatus.ERROR, device_handle=HANDLE)
        new_state, effects = update(state, StartSession(FacingMode.REAR))

        assert new_state.device_handle is None
        assert effects[0] == ReleaseDevice(HANDLE)
        assert isinstance(effects[1], Cooldown)

    @pytest.mark.parametrize("status", [
        SessionStatus.INITIALIZING,
        SessionStatus.ACTIVE,
        SessionStatus.SWITCHING_FACING,
        SessionStatus.STOPPING,
    ])
    def test_rejected_outside_idle_or_error(self, status):
        state = SessionState(status=status, generation=2)
        new_state, effects = update(state, StartSession(FacingMode.REAR))

        assert new_state == state
        assert effects == []


class TestAcquisition:
    def test_cooldown_elapsed_requests_acquire(self):
        state = SessionState(status=SessionStatus.INITIALIZING, generation=1)
        new_state, effects = update(state, CooldownElapsed(1, FacingMode.REAR))

        assert new_state == state
        assert effects == [AcquireDevice(1, FacingMode.REAR)]

    def test_stale_cooldown_ignored(self):
        state = SessionState(status=SessionStatus.INITIALIZING, generation=2)
        _, effects = update(state, CooldownElapsed(1, FacingMode.REAR))

        assert effects == []

    def test_device_acquired_stores_handle(self):
        state = SessionState(status=SessionStatus.INITIALIZING, generation=1)
        new_state, effects = update(state, DeviceAcquired(1, HANDLE, FacingMode.REAR))

        assert new_state.device_handle is HANDLE
        assert new_state.status == SessionStatus.INITIALIZING
        assert effects == [AwaitFirstFrame(1, HANDLE, FacingMode.REAR)]

    def test_stale_acquisition_released(self):
        state = SessionState(status=SessionStatus.IDLE, generation=2)
        new_state, effects = update(state, DeviceAcquired(1, HANDLE, FacingMode.REAR))

        assert new_state == state
        assert effects == [ReleaseDevice(HANDLE)]

    def test_second_handle_for_same_generation_released(self):
        state = SessionState(
            status=SessionStatus.INITIALIZING, generation=1, device_handle=HANDLE
        )
        new_state, effects = update(state, DeviceAcquired(1, OTHER_HANDLE, FacingMode.REAR))

        assert new_state.device_handle is HANDLE
        assert effects == [ReleaseDevice(OTHER_HANDLE)]

    def test_device_ready_activates_with_stream_fallback(self):
        state = SessionState(
            status=SessionStatus.INITIALIZING, generation=1, device_handle=HANDLE
        )
        caps = DeviceCapabilities(supports_torch=False, supports_snapshot=False)
        new_state, effects = update(state, DeviceReady(1, FacingMode.REAR, caps))

        assert new_state.status == SessionStatus.ACTIVE
        assert new_state.is_active
        assert new_state.flash_capable is False
        assert new_state.capture_method == CaptureMethod.STREAM_FALLBACK
        assert len(effects) == 1
        assert isinstance(effects[0], SendStatus)
        assert effects[0].status_type == "session_active"

    def test_device_ready_prefers_snapshot(self):
        state = SessionState(
            status=SessionStatus.INITIALIZING, generation=1, device_handle=HANDLE
        )
        caps = DeviceCapabilities(supports_torch=True, supports_snapshot=True)
        new_state, _ = update(state, DeviceReady(1, FacingMode.REAR, caps))

        assert new_state.capture_method == CaptureMethod.SNAPSHOT
        assert new_state.flash_capable is True

    def test_stale_ready_ignored(self):
        state = SessionState(status=SessionStatus.STOPPING, generation=2)
        new_state, effects = update(
            state, DeviceReady(1, FacingMode.REAR, DeviceCapabilities())
        )

        assert new_state == state
        assert effects == []


class TestDeviceFailed:
    def test_failure_enters_error_and_releases(self):
        state = SessionState(
            status=SessionStatus.INITIALIZING, generation=1, device_handle=HANDLE
        )
        new_state, effects = update(
            state, DeviceFailed(1, ErrorKind.ACQUISITION_TIMEOUT, "no frame")
        )

        assert new_state.status == SessionStatus.ERROR
        assert new_state.device_handle is None
        assert new_state.error == SessionError(ErrorKind.ACQUISITION_TIMEOUT, "no frame")
        assert effects[0] == ReleaseDevice(HANDLE)
        assert effects[1].status_type == "session_error"

    def test_switch_failure_keeps_prior_facing(self):
        state = SessionState(
            status=SessionStatus.SWITCHING_FACING,
            facing_mode=FacingMode.REAR,
            generation=4,
        )
        new_state, _ = update(
            state, DeviceFailed(4, ErrorKind.DEVICE_UNAVAILABLE, "busy")
        )

        assert new_state.status == SessionStatus.ERROR
        assert new_state.facing_mode == FacingMode.REAR

    def test_stale_failure_ignored(self):
        state = SessionState(status=SessionStatus.IDLE, generation=3)
        new_state, effects = update(
            state, DeviceFailed(2, ErrorKind.DEVICE_UNAVAILABLE, "late")
        )

        assert new_state == state
        assert effects == []


class TestSwitchFacing:
    def test_from_active_releases_then_cools_down(self):
        state = active_state()
        new_state, effects = update(state, SwitchFacing())

        assert new_state.status == SessionStatus.SWITCHING_FACING
        assert new_state.device_handle is None
        assert new_state.generation == 4
        assert new_state.facing_mode == FacingMode.REAR
        assert effects == [
            ReleaseDevice(HANDLE),
            Cooldown(4, FacingMode.FRONT, after_switch=True),
        ]

    @pytest.mark.parametrize("status", [
        SessionStatus.IDLE,
        SessionStatus.INITIALIZING,
        SessionStatus.SWITCHING_FACING,
        SessionStatus.STOPPING,
        SessionStatus.ERROR,
    ])
    def test_rejected_unless_active(self, status):
        state = SessionState(status=status, generation=1)
        new_state, effects = update(state, SwitchFacing())

        assert new_state == state
        assert effects == []

    def test_rejected_while_flash_change_pending(self):
        state = active_state(flash_pending=True)
        new_state, effects = update(state, SwitchFacing())

        assert new_state == state
        assert effects == []

    def test_ready_after_switch_records_new_facing(self):
        state = SessionState(
            status=SessionStatus.SWITCHING_FACING,
            facing_mode=FacingMode.REAR,
            generation=4,
            device_handle=OTHER_HANDLE,
        )
        new_state, _ = update(
            state, DeviceReady(4, FacingMode.FRONT, DeviceCapabilities())
        )

        assert new_state.status == SessionStatus.ACTIVE
        assert new_state.facing_mode == FacingMode.FRONT


class TestStopSession:
    def test_from_idle_is_noop(self):
        state = SessionState()
        new_state, effects = update(state, StopSession())

        assert new_state == state
        assert effects == []

    def test_from_active_releases_and_confirms(self):
        state = active_state(flash_enabled=True)
        new_state, effects = update(state, StopSession())

        assert new_state.status == SessionStatus.STOPPING
        assert new_state.device_handle is None
        assert new_state.flash_enabled is False
        assert new_state.flash_capable is False
        assert effects == [ReleaseDevice(HANDLE), ConfirmStopped(4)]

    def test_while_initializing_invalidates_pending_acquisition(self):
        state = SessionState(status=SessionStatus.INITIALIZING, generation=1)
        stopping, effects = update(state, StopSession())

        assert stopping.generation == 2
        assert effects == [ConfirmStopped(2)]

        _, late_effects = update(stopping, DeviceAcquired(1, HANDLE, FacingMode.REAR))
        assert late_effects == [ReleaseDevice(HANDLE)]

    def test_stop_completed_returns_to_idle(self):
        state = SessionState(status=SessionStatus.STOPPING, generation=2)
        new_state, effects = update(state, StopCompleted(2))

        assert new_state.status == SessionStatus.IDLE
        assert effects == [SendStatus("session_stopped", {})]

    def test_stale_stop_completed_ignored(self):
        state = SessionState(status=SessionStatus.INITIALIZING, generation=3)
        new_state, effects = update(state, StopCompleted(2))

        assert new_state == state
        assert effects == []

    def test_second_stop_while_stopping_is_noop(self):
        state = SessionState(status=SessionStatus.STOPPING, generation=2)
        new_state, effects = update(state, StopSession())

        assert new_state == state
        assert effects == []


class TestShutdown:
    def test_forces_idle_and_releases(self):
        state = active_state()
        new_state, effects = update(state, Shutdown())

        assert new_state.status == SessionStatus.IDLE
        assert new_state.device_handle is None
        assert new_state.generation == 4
        assert effects[0] == ReleaseDevice(HANDLE)

    def test_idle_without_handle_is_noop(self):
        state = SessionState()
        new_state, effects = update(state, Shutdown())

        assert new_state == state
        assert effects == []


class TestFlash:
    def test_toggle_requests_torch_on(self):
        state = active_state()
        new_state, effects = update(state, ToggleFlash())

        assert new_state.flash_pending is True
        assert effects == [ApplyTorch(HANDLE, True)]

    def test_toggle_requests_torch_off_when_enabled(self):
        state = active_state(flash_enabled=True)
        _, effects = update(state, ToggleFlash())

        assert effects == [ApplyTorch(HANDLE, False)]

    def test_rejected_while_pending(self):
        state = active_state(flash_pending=True)
        new_state, effects = update(state, ToggleFlash())

        assert new_state == state
        assert effects == []

    def test_rejected_without_torch(self):
        state = active_state(flash_capable=False)
        _, effects = update(state, ToggleFlash())

        assert effects == []

    def test_rejected_when_not_active(self):
        state = SessionState(status=SessionStatus.INITIALIZING, flash_capable=True)
        _, effects = update(state, ToggleFlash())

        assert effects == []

    def test_flash_changed_clears_pending(self):
        state = active_state(flash_pending=True)
        new_state, effects = update(state, FlashChanged(True))

        assert new_state.flash_enabled is True
        assert new_state.flash_pending is False
        assert effects == [SendStatus("flash_changed", {"enabled": True})]

    def test_flash_changed_after_stop_stays_off(self):
        state = SessionState(status=SessionStatus.STOPPING, flash_pending=True)
        new_state, _ = update(state, FlashChanged(True))

        assert new_state.flash_enabled is False
        assert new_state.flash_pending is False

    def test_flash_failed_keeps_status(self):
        state = active_state(flash_pending=True)
        new_state, effects = update(state, FlashFailed("rejected"))

        assert new_state.status == SessionStatus.ACTIVE
        assert new_state.flash_pending is False
        assert new_state.flash_enabled is False
        assert effects == []
