"""One-shot frame acquisition from an active device handle."""

from __future__ import annotations

import time
from typing import Any, Optional

import numpy as np

from omr_scanner.core.errors import SourceNotReadyError
from omr_scanner.core.logging_utils import LoggerLike, ensure_structured_logger

from .device import CaptureDevice, DeviceError, Resolution
from .frame import CaptureMethod, RawFrame

DEFAULT_SNAPSHOT_SIZE: Resolution = (4096, 4096)


class FrameSource:
    """Produces one full-resolution RGBA frame per call.

    ``SNAPSHOT`` asks the device for a single high-resolution photo and drops
    to the live video buffer if that fails. ``STREAM_FALLBACK`` reads the video
    buffer directly. The returned frame records the path that produced it.
    """

    def __init__(
        self,
        device: CaptureDevice,
        *,
        snapshot_size: Resolution = DEFAULT_SNAPSHOT_SIZE,
        logger: LoggerLike = None,
    ) -> None:
        self._device = device
        self._snapshot_size = snapshot_size
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

    async def grab(self, handle: Any, method: CaptureMethod) -> RawFrame:
        if handle is None:
            raise SourceNotReadyError("no active device handle")

        if method is CaptureMethod.SNAPSHOT:
            try:
                data = await self._device.take_photo(handle, self._snapshot_size)
            except DeviceError as exc:
                self._logger.warning("Snapshot capture failed, using video buffer: %s", exc)
            else:
                if _has_pixels(data):
                    self._logger.debug("Snapshot captured at %dx%d", data.shape[1], data.shape[0])
                    return RawFrame(data=data, method=CaptureMethod.SNAPSHOT, wall_time=time.time())
                self._logger.warning("Snapshot capture returned no pixels, using video buffer")

        try:
            data = self._device.read_frame(handle)
        except DeviceError as exc:
            raise SourceNotReadyError(f"video buffer unavailable: {exc}") from exc
        if not _has_pixels(data):
            raise SourceNotReadyError("video buffer has no decoded frame yet")
        self._logger.debug("Video frame sampled at %dx%d", data.shape[1], data.shape[0])
        return RawFrame(data=data, method=CaptureMethod.STREAM_FALLBACK, wall_time=time.time())


def _has_pixels(data: Optional[np.ndarray]) -> bool:
    return data is not None and data.ndim == 3 and data.shape[0] > 0 and data.shape[1] > 0


__all__ = ["DEFAULT_SNAPSHOT_SIZE", "FrameSource"]
