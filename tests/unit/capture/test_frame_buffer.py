import asyncio
import threading

import numpy as np
import pytest

from omr_scanner.capture import LatestFrameBuffer


class TestLatestFrameBuffer:
    @pytest.mark.asyncio
    async def test_empty_buffer(self):
        buffer = LatestFrameBuffer()
        assert buffer.latest() is None
        assert buffer.has_frame is False
        assert buffer.frame_count == 0

    @pytest.mark.asyncio
    async def test_overwrite_keeps_latest(self):
        buffer = LatestFrameBuffer()
        first = np.zeros((2, 2, 3), dtype=np.uint8)
        second = np.ones((2, 2, 3), dtype=np.uint8)

        assert buffer.put_overwrite(first) is True
        assert buffer.put_overwrite(second) is False

        assert buffer.latest() is second
        assert buffer.frame_count == 2
        assert buffer.overwrites == 1

    @pytest.mark.asyncio
    async def test_first_frame_from_thread_wakes_waiter(self):
        buffer = LatestFrameBuffer()
        frame = np.zeros((2, 2, 3), dtype=np.uint8)

        thread = threading.Thread(target=buffer.put_overwrite, args=(frame,))
        thread.start()
        await asyncio.wait_for(buffer.wait_first(), timeout=1.0)
        thread.join()

        assert buffer.has_frame
        assert buffer.latest() is frame

    @pytest.mark.asyncio
    async def test_clear_drops_frame(self):
        buffer = LatestFrameBuffer()
        buffer.put_overwrite(np.zeros((2, 2, 3), dtype=np.uint8))
        buffer.clear()
        assert buffer.latest() is None
