import pytest

from omr_scanner.capture import CaptureConstraints, CaptureMethod, FacingMode, FrameSource
from omr_scanner.core.errors import SourceNotReadyError
from tests.infrastructure.mocks.capture_device import FakeCaptureDevice


async def acquired(device: FakeCaptureDevice):
    return await device.acquire(CaptureConstraints(facing_mode=FacingMode.REAR))


class TestFrameSource:
    @pytest.mark.asyncio
    async def test_snapshot_used_when_available(self, make_rgba):
        photo = make_rgba(3000, 4000)
        device = FakeCaptureDevice(photo=photo, supports_snapshot=True)
        handle = await acquired(device)

        frame = await FrameSource(device).grab(handle, CaptureMethod.SNAPSHOT)

        assert frame.method == CaptureMethod.SNAPSHOT
        assert frame.size == (3000, 4000)
        assert frame.data is photo

    @pytest.mark.asyncio
    async def test_snapshot_failure_falls_back_to_stream(self):
        device = FakeCaptureDevice(supports_snapshot=True)
        device.fail_photo = True
        handle = await acquired(device)

        frame = await FrameSource(device).grab(handle, CaptureMethod.SNAPSHOT)

        assert device.photo_calls == 1
        assert frame.method == CaptureMethod.STREAM_FALLBACK
        assert frame.size == (1080, 1920)

    @pytest.mark.asyncio
    async def test_stream_fallback_skips_snapshot(self, make_rgba):
        device = FakeCaptureDevice(photo=make_rgba(10, 10))
        handle = await acquired(device)

        frame = await FrameSource(device).grab(handle, CaptureMethod.STREAM_FALLBACK)

        assert device.photo_calls == 0
        assert frame.method == CaptureMethod.STREAM_FALLBACK

    @pytest.mark.asyncio
    async def test_no_handle(self):
        with pytest.raises(SourceNotReadyError):
            await FrameSource(FakeCaptureDevice()).grab(None, CaptureMethod.STREAM_FALLBACK)

    @pytest.mark.asyncio
    async def test_released_handle_has_no_frame(self):
        device = FakeCaptureDevice()
        handle = await acquired(device)
        await device.release(handle)

        with pytest.raises(SourceNotReadyError):
            await FrameSource(device).grab(handle, CaptureMethod.STREAM_FALLBACK)
