import asyncio
import threading
from typing import Optional

import numpy as np


class LatestFrameBuffer:
    """Holds the most recent frame written by a capture thread.

    Writers call :meth:`put_overwrite` from any thread; the first write wakes
    coroutines blocked in :meth:`wait_first` on the owning event loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._frame_count = 0
        self._overwrites = 0
        self._loop = loop or asyncio.get_running_loop()
        self._first_frame = asyncio.Event()

    def _signal_first(self) -> None:
        try:
            self._loop.call_soon_threadsafe(self._first_frame.set)
        except RuntimeError:
            # loop already closed
            pass

    def put_overwrite(self, frame: np.ndarray) -> bool:
        with self._lock:
            replaced = self._frame is not None
            if replaced:
                self._overwrites += 1
            self._frame = frame
            self._frame_count += 1
            first = self._frame_count == 1
        if first:
            self._signal_first()
        return not replaced

    def latest(self) -> Optional[np.ndarray]:
        with self._lock:
            return self._frame

    async def wait_first(self) -> None:
        await self._first_frame.wait()

    def clear(self) -> None:
        with self._lock:
            self._frame = None

    @property
    def has_frame(self) -> bool:
        return self._first_frame.is_set()

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def overwrites(self) -> int:
        return self._overwrites
