from dataclasses import dataclass
from enum import Enum

import numpy as np


class CaptureMethod(Enum):
    SNAPSHOT = "snapshot"
    STREAM_FALLBACK = "stream-fallback"


@dataclass(frozen=True, slots=True)
class RawFrame:
    data: np.ndarray  # H x W x 4, RGBA uint8
    method: CaptureMethod
    wall_time: float

    @property
    def width(self) -> int:
        return int(self.data.shape[1]) if self.data.ndim >= 2 else 0

    @property
    def height(self) -> int:
        return int(self.data.shape[0]) if self.data.ndim >= 2 else 0

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height
