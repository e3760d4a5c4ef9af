"""Effect executor for the capture session.

Runs the side effects requested by the reducer against the injected
:class:`CaptureDevice` and feeds the outcomes back as actions:
- device release and cooldown pacing
- acquisition and the bounded first-frame wait
- torch constraint changes
- status notifications for the UI
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from omr_scanner.capture.device import CaptureDevice, DeviceError, FacingMode
from omr_scanner.config import CaptureSettings, SessionSettings
from omr_scanner.core.errors import ErrorKind, FeatureUnavailableError
from omr_scanner.core.logging_utils import LoggerLike, ensure_structured_logger

from .actions import (
    Action,
    CooldownElapsed, DeviceAcquired, DeviceReady, DeviceFailed, StopCompleted,
    FlashChanged, FlashFailed,
)
from .effects import (
    Effect,
    ReleaseDevice, Cooldown, AcquireDevice, AwaitFirstFrame, ConfirmStopped,
    ApplyTorch, SendStatus,
)

Dispatch = Callable[[Action], Awaitable[None]]
StatusCallback = Callable[[str, dict], None]


class EffectExecutor:
    """Executes side effects for the capture session."""

    def __init__(
        self,
        device: CaptureDevice,
        session_settings: Optional[SessionSettings] = None,
        capture_settings: Optional[CaptureSettings] = None,
        status_callback: Optional[StatusCallback] = None,
        *,
        logger: LoggerLike = None,
    ):
        self._device = device
        self._session = session_settings or SessionSettings()
        self._capture = capture_settings or CaptureSettings()
        self._status_callback = status_callback
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

        # Readiness waits still in flight, keyed by handle identity
        self._ready_waits: list[tuple[Any, asyncio.Task]] = []

    async def __call__(self, effect: Effect, dispatch: Dispatch) -> None:
        """Execute an effect."""
        match effect:
            case ReleaseDevice(handle):
                await self._release(handle)

            case Cooldown(generation, facing_mode, after_switch):
                await self._cooldown(generation, facing_mode, after_switch, dispatch)

            case AcquireDevice(generation, facing_mode):
                await self._acquire(generation, facing_mode, dispatch)

            case AwaitFirstFrame(generation, handle, facing_mode):
                await self._await_first_frame(generation, handle, facing_mode, dispatch)

            case ConfirmStopped(generation):
                await dispatch(StopCompleted(generation))

            case ApplyTorch(handle, enabled):
                await self._apply_torch(handle, enabled, dispatch)

            case SendStatus(status_type, payload):
                if self._status_callback:
                    self._status_callback(status_type, payload)

    async def _release(self, handle: Any) -> None:
        for pending_handle, task in list(self._ready_waits):
            if pending_handle is handle and not task.done():
                task.cancel()
        try:
            await self._device.release(handle)
        except DeviceError as exc:
            # The handle is dropped from the session either way.
            self._logger.warning("Device release reported an error: %s", exc)
        else:
            self._logger.debug("Device handle released")

    async def _cooldown(
        self,
        generation: int,
        facing_mode: FacingMode,
        after_switch: bool,
        dispatch: Dispatch,
    ) -> None:
        delay = self._session.switch_cooldown_s if after_switch else self._session.start_cooldown_s
        if delay > 0:
            self._logger.debug("Waiting %.2fs before acquiring %s camera", delay, facing_mode.value)
            await asyncio.sleep(delay)
        await dispatch(CooldownElapsed(generation, facing_mode))

    async def _acquire(self, generation: int, facing_mode: FacingMode, dispatch: Dispatch) -> None:
        constraints = self._capture.constraints_for(facing_mode)
        try:
            handle = await self._device.acquire(constraints)
        except DeviceError as exc:
            self._logger.error("Failed to acquire %s camera: %s", facing_mode.value, exc)
            await dispatch(DeviceFailed(generation, ErrorKind.DEVICE_UNAVAILABLE, str(exc)))
            return
        except Exception as exc:
            self._logger.exception("Camera backend crashed acquiring %s camera", facing_mode.value)
            await dispatch(DeviceFailed(generation, ErrorKind.DEVICE_UNAVAILABLE, _describe(exc)))
            return
        self._logger.info("Acquired %s camera (generation %d)", facing_mode.value, generation)
        await dispatch(DeviceAcquired(generation, handle, facing_mode))

    async def _await_first_frame(
        self,
        generation: int,
        handle: Any,
        facing_mode: FacingMode,
        dispatch: Dispatch,
    ) -> None:
        timeout = self._session.ready_timeout_s
        task = asyncio.create_task(self._device.wait_ready(handle))
        entry = (handle, task)
        self._ready_waits.append(entry)
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        finally:
            self._ready_waits.remove(entry)

        if not done:
            task.cancel()
            message = f"no frame from {facing_mode.value} camera within {timeout:g}s"
            self._logger.error("Readiness timeout: %s", message)
            await dispatch(DeviceFailed(generation, ErrorKind.ACQUISITION_TIMEOUT, message))
            return

        if task.cancelled():
            # Handle was released underneath us by a stop or restart.
            self._logger.debug("Readiness wait for generation %d superseded", generation)
            return

        exc = task.exception()
        if exc is not None:
            if isinstance(exc, DeviceError):
                self._logger.error("Camera failed before first frame: %s", exc)
            else:
                self._logger.error("Camera backend crashed before first frame", exc_info=exc)
            await dispatch(DeviceFailed(generation, ErrorKind.DEVICE_UNAVAILABLE, _describe(exc)))
            return

        try:
            capabilities = self._device.capabilities(handle)
        except Exception as exc:
            self._logger.exception("Could not read %s camera capabilities", facing_mode.value)
            await dispatch(DeviceFailed(generation, ErrorKind.DEVICE_UNAVAILABLE, _describe(exc)))
            return
        self._logger.info(
            "%s camera ready (snapshot=%s, torch=%s)",
            facing_mode.value.capitalize(),
            capabilities.supports_snapshot,
            capabilities.supports_torch,
        )
        await dispatch(DeviceReady(generation, facing_mode, capabilities))

    async def _apply_torch(self, handle: Any, enabled: bool, dispatch: Dispatch) -> None:
        try:
            await self._device.apply_constraint(handle, "torch", enabled)
        except DeviceError as exc:
            self._logger.warning("Torch change rejected by device: %s", exc)
            await dispatch(FlashFailed(str(exc)))
            raise FeatureUnavailableError(f"torch could not be set: {exc}") from exc
        except Exception as exc:
            self._logger.exception("Camera backend crashed applying torch")
            await dispatch(FlashFailed(_describe(exc)))
            raise FeatureUnavailableError(f"torch could not be set: {_describe(exc)}") from exc
        self._logger.info("Flash %s", "enabled" if enabled else "disabled")
        await dispatch(FlashChanged(enabled))


def _describe(exc: BaseException) -> str:
    if isinstance(exc, DeviceError):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"
