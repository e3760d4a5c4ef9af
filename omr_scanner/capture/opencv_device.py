"""Capture device backed by OpenCV's VideoCapture."""

import os
import sys

# Disable MSMF hardware transforms on Windows to fix slow camera initialization.
# See: https://github.com/opencv/opencv/issues/17687
if sys.platform == "win32":
    os.environ.setdefault("OPENCV_VIDEOIO_MSMF_ENABLE_HW_TRANSFORMS", "0")

import asyncio
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import cv2
import numpy as np

from omr_scanner.core.logging_utils import LoggerLike, ensure_structured_logger

from .device import (
    CaptureConstraints,
    DeviceCapabilities,
    DeviceDescriptor,
    DeviceError,
    FacingMode,
    Resolution,
)
from .frame_buffer import LatestFrameBuffer

DEFAULT_FACING_INDICES: dict[FacingMode, int] = {
    FacingMode.REAR: 0,
    FacingMode.FRONT: 1,
}
DEFAULT_PROBE_LIMIT = 4
DEFAULT_RELEASE_TIMEOUT = 2.0
RELEASE_JOIN_ATTEMPTS = 2


@dataclass(eq=False)
class OpenCVHandle:
    index: int
    facing: FacingMode
    capture: Any
    buffer: LatestFrameBuffer
    native_resolution: Resolution
    max_resolution: Resolution
    running: bool = True
    thread: Optional[threading.Thread] = field(default=None, repr=False)
    # Guards the hand-off of cap.release() to a reader stuck in cap.read()
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    reader_done: bool = False
    release_on_exit: bool = False

    @property
    def device_id(self) -> str:
        return f"opencv:{self.index}"


def _open_capture(index: int) -> Any:
    if sys.platform == "win32":
        return cv2.VideoCapture(index, cv2.CAP_MSMF)
    return cv2.VideoCapture(index)


class OpenCVCaptureDevice:
    """Maps facing modes onto OpenCV device indices.

    OpenCV has no torch control and no separate still-capture path, so
    handles report neither capability and scans always sample the video
    buffer.
    """

    def __init__(
        self,
        *,
        facing_indices: Optional[dict[FacingMode, int]] = None,
        probe_limit: int = DEFAULT_PROBE_LIMIT,
        release_timeout: float = DEFAULT_RELEASE_TIMEOUT,
        logger: LoggerLike = None,
    ) -> None:
        self._facing_indices = dict(facing_indices or DEFAULT_FACING_INDICES)
        self._probe_limit = probe_limit
        self._release_timeout = release_timeout
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

    async def enumerate(self) -> list[DeviceDescriptor]:
        indices = await asyncio.to_thread(self._probe_indices)
        facing_by_index = {index: facing for facing, index in self._facing_indices.items()}
        return [
            DeviceDescriptor(
                device_id=f"opencv:{index}",
                label=f"Camera {index}",
                facing=facing_by_index.get(index),
            )
            for index in indices
        ]

    def _probe_indices(self) -> list[int]:
        found = []
        for index in range(self._probe_limit):
            cap = _open_capture(index)
            try:
                if cap is not None and cap.isOpened():
                    found.append(index)
            finally:
                if cap is not None:
                    cap.release()
        self._logger.debug("Probed %d indices, found %s", self._probe_limit, found)
        return found

    async def acquire(self, constraints: CaptureConstraints) -> OpenCVHandle:
        index = self._facing_indices.get(constraints.facing_mode)
        if index is None:
            raise DeviceError(f"No device configured for {constraints.facing_mode.value} camera")

        start_time = time.monotonic()
        cap = await asyncio.to_thread(self._open_configured, index, constraints)
        self._logger.debug(
            "VideoCapture(%d) took %.2f seconds", index, time.monotonic() - start_time
        )

        native = (
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        handle = OpenCVHandle(
            index=index,
            facing=constraints.facing_mode,
            capture=cap,
            buffer=LatestFrameBuffer(asyncio.get_running_loop()),
            native_resolution=native,
            max_resolution=constraints.max_resolution,
        )
        handle.thread = threading.Thread(
            target=self._capture_loop,
            args=(handle,),
            name=f"omr-capture-{index}",
            daemon=True,
        )
        handle.thread.start()
        self._logger.info(
            "Camera opened: device=%d facing=%s resolution=%dx%d",
            index,
            constraints.facing_mode.value,
            *native,
        )
        return handle

    def _open_configured(self, index: int, constraints: CaptureConstraints) -> Any:
        cap = _open_capture(index)
        if cap is None or not cap.isOpened():
            if cap is not None:
                cap.release()
            raise DeviceError(f"Failed to open camera {index}")

        # MJPG keeps high resolutions at usable frame rates on most USB cameras
        cap.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter_fourcc(*"MJPG"))
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.ideal_resolution[0])
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.ideal_resolution[1])
        cap.set(cv2.CAP_PROP_FPS, constraints.ideal_fps)
        cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        if constraints.continuous_focus:
            cap.set(cv2.CAP_PROP_AUTOFOCUS, 1)
        return cap

    def _capture_loop(self, handle: OpenCVHandle) -> None:
        frames = 0
        try:
            while handle.running:
                cap = handle.capture
                if cap is None or not cap.isOpened():
                    break
                ret, frame_data = cap.read()
                if not handle.running:
                    break
                if not ret or frame_data is None:
                    time.sleep(0.005)
                    continue
                handle.buffer.put_overwrite(frame_data)
                frames += 1
        finally:
            with handle.lock:
                handle.reader_done = True
                if handle.release_on_exit and handle.capture is not None:
                    handle.capture.release()
                    handle.capture = None
                    self._logger.info("Camera %d released by its capture thread", handle.index)
        self._logger.debug("Capture loop for device %d ended after %d frames", handle.index, frames)

    async def wait_ready(self, handle: OpenCVHandle) -> None:
        await handle.buffer.wait_first()
        frame = handle.buffer.latest()
        if frame is not None:
            handle.native_resolution = (int(frame.shape[1]), int(frame.shape[0]))

    async def release(self, handle: OpenCVHandle) -> None:
        handle.running = False
        thread = handle.thread
        if thread is not None:
            for _ in range(RELEASE_JOIN_ATTEMPTS):
                await asyncio.to_thread(thread.join, self._release_timeout)
                if not thread.is_alive():
                    break
                self._logger.warning(
                    "Capture thread for camera %d still inside read(); waiting", handle.index
                )
            handle.thread = None

        with handle.lock:
            deferred = not handle.reader_done and thread is not None
            if deferred:
                handle.release_on_exit = True
        if deferred:
            handle.buffer.clear()
            self._logger.error(
                "Capture thread for camera %d did not stop; it will release the device "
                "when its read returns",
                handle.index,
            )
            return

        cap = handle.capture
        if cap is not None:
            await asyncio.to_thread(cap.release)
            handle.capture = None
        handle.buffer.clear()
        self._logger.info("Camera %d released", handle.index)

    async def apply_constraint(self, handle: OpenCVHandle, name: str, value: Any) -> None:
        prop = _CONSTRAINT_PROPS.get(name)
        if prop is None:
            raise DeviceError(f"Constraint '{name}' is not supported by OpenCV devices")
        cap = handle.capture
        if cap is None:
            raise DeviceError("Device handle already released")
        accepted = await asyncio.to_thread(cap.set, prop, float(value))
        if not accepted:
            raise DeviceError(f"Device rejected {name}={value}")

    def capabilities(self, handle: OpenCVHandle) -> DeviceCapabilities:
        return DeviceCapabilities(
            supports_torch=False,
            supports_snapshot=False,
            native_resolution=handle.native_resolution,
            max_resolution=handle.max_resolution,
        )

    async def take_photo(self, handle: OpenCVHandle, max_size: Resolution) -> np.ndarray:
        raise DeviceError("OpenCV devices have no single-shot capture")

    def read_frame(self, handle: OpenCVHandle) -> Optional[np.ndarray]:
        frame = handle.buffer.latest()
        if frame is None:
            return None
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)


_CONSTRAINT_PROPS: dict[str, int] = {
    "autofocus": cv2.CAP_PROP_AUTOFOCUS,
    "focus": cv2.CAP_PROP_FOCUS,
    "exposure": cv2.CAP_PROP_EXPOSURE,
    "auto_exposure": cv2.CAP_PROP_AUTO_EXPOSURE,
    "auto_white_balance": cv2.CAP_PROP_AUTO_WB,
    "zoom": cv2.CAP_PROP_ZOOM,
}


__all__ = ["DEFAULT_FACING_INDICES", "OpenCVCaptureDevice", "OpenCVHandle"]
