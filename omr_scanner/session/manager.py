"""Facade over the session store: the operations a scanning UI calls."""

import asyncio
from typing import Callable, Optional

from omr_scanner.capture.device import CaptureDevice, DeviceDescriptor, DeviceError, FacingMode
from omr_scanner.capture.frame_source import FrameSource
from omr_scanner.config import ScannerConfig
from omr_scanner.core.errors import (
    DeviceUnavailableError,
    FeatureUnavailableError,
    SourceNotReadyError,
    error_for,
)
from omr_scanner.core.logging_utils import LoggerLike, ensure_structured_logger
from omr_scanner.pipeline.artifact import CapturedArtifact
from omr_scanner.pipeline.extract import extract_region
from omr_scanner.templates import TemplateRegistry, default_registry

from .actions import StartSession, StopSession, SwitchFacing, ToggleFlash, Shutdown
from .executor import EffectExecutor, StatusCallback
from .state import SessionState, SessionStatus
from .store import Store, create_store
from .update import STARTABLE_STATES


class CaptureSessionManager:
    """Owns the camera for one scanning screen.

    Every lifecycle request goes through the store, so overlapping requests are
    resolved by the reducer: a start while one is in flight is rejected, and a
    stop invalidates whatever acquisition is still pending.
    """

    def __init__(
        self,
        device: CaptureDevice,
        *,
        config: Optional[ScannerConfig] = None,
        registry: TemplateRegistry = default_registry,
        status_callback: Optional[StatusCallback] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._config = config or ScannerConfig()
        self._registry = registry
        self._logger = ensure_structured_logger(logger, component="CaptureSession")
        self._device = device
        self._store: Store = create_store(self._config.session.default_facing)
        self._store.set_effect_handler(
            EffectExecutor(
                device,
                self._config.session,
                self._config.capture,
                status_callback,
                logger=self._logger.getChild("executor"),
            )
        )
        self._frame_source = FrameSource(
            device,
            snapshot_size=self._config.capture.snapshot_size,
            logger=self._logger.getChild("frames"),
        )
        self._pipeline_logger = self._logger.getChild("pipeline")
        self._last_artifact: Optional[CapturedArtifact] = None

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def state(self) -> SessionState:
        return self._store.state

    @property
    def templates(self) -> TemplateRegistry:
        return self._registry

    @property
    def last_artifact(self) -> Optional[CapturedArtifact]:
        return self._last_artifact

    def subscribe(self, callback: Callable[[SessionState], None]) -> Callable[[], None]:
        return self._store.subscribe(callback)

    # ------------------------------------------------------------------
    # Lifecycle

    async def start(self, facing: FacingMode | str | None = None) -> bool:
        state = self._store.state
        if state.status not in STARTABLE_STATES:
            self._logger.debug("Start rejected while %s", state.status.name)
            return False

        facing_mode = FacingMode(facing) if facing is not None else state.facing_mode
        generation = state.generation + 1
        self._logger.info("Starting %s camera", facing_mode.value)
        await self._store.dispatch(StartSession(facing_mode))
        self._raise_if_failed(generation)
        return self._store.state.is_active

    async def stop(self) -> None:
        self._last_artifact = None
        if self._store.state.status == SessionStatus.IDLE:
            return
        self._logger.info("Stopping camera session")
        await self._store.dispatch(StopSession())

    async def switch_facing(self) -> bool:
        state = self._store.state
        if state.status != SessionStatus.ACTIVE or state.is_transitioning:
            self._logger.debug(
                "Camera switch rejected while %s%s",
                state.status.name,
                " (flash change pending)" if state.flash_pending else "",
            )
            return False

        generation = state.generation + 1
        self._logger.info("Switching to %s camera", state.facing_mode.toggled().value)
        await self._store.dispatch(SwitchFacing())
        self._raise_if_failed(generation)
        return self._store.state.is_active

    async def toggle_flash(self) -> bool:
        state = self._store.state
        if state.status != SessionStatus.ACTIVE or state.is_transitioning:
            self._logger.debug("Flash toggle rejected while %s", state.status.name)
            return False
        if not state.flash_capable:
            raise FeatureUnavailableError("active camera has no torch")
        await self._store.dispatch(ToggleFlash())
        return True

    async def teardown(self) -> None:
        self._last_artifact = None
        try:
            await self._store.dispatch(Shutdown())
        except Exception:
            self._logger.exception("Error during camera teardown")

    async def list_devices(self) -> list[DeviceDescriptor]:
        try:
            return await self._device.enumerate()
        except DeviceError as exc:
            raise DeviceUnavailableError(f"camera enumeration failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Scanning

    async def scan(self, template_id: Optional[str] = None) -> CapturedArtifact:
        template = self._registry[template_id or self._config.output.default_template]

        state = self._store.state
        if not state.is_active or state.capture_method is None:
            raise SourceNotReadyError(f"camera session is {state.status.name.lower()}")

        frame = await self._frame_source.grab(state.device_handle, state.capture_method)
        artifact = await asyncio.to_thread(
            extract_region, frame, template, logger=self._pipeline_logger
        )
        self._last_artifact = artifact
        return artifact

    async def retake(self) -> bool:
        self.discard_artifact()
        state = self._store.state
        if state.is_active:
            return True
        return await self.start(state.facing_mode)

    def discard_artifact(self) -> None:
        self._last_artifact = None

    def _raise_if_failed(self, generation: int) -> None:
        state = self._store.state
        if (
            state.status == SessionStatus.ERROR
            and state.generation == generation
            and state.error is not None
        ):
            raise error_for(state.error.kind, state.error.message)
