from .device import (
    CaptureConstraints,
    CaptureDevice,
    DeviceCapabilities,
    DeviceDescriptor,
    DeviceError,
    FacingMode,
    Resolution,
)
from .frame import CaptureMethod, RawFrame
from .frame_buffer import LatestFrameBuffer
from .frame_source import DEFAULT_SNAPSHOT_SIZE, FrameSource

__all__ = [
    "CaptureConstraints",
    "CaptureDevice",
    "CaptureMethod",
    "DEFAULT_SNAPSHOT_SIZE",
    "DeviceCapabilities",
    "DeviceDescriptor",
    "DeviceError",
    "FacingMode",
    "FrameSource",
    "LatestFrameBuffer",
    "RawFrame",
    "Resolution",
]
