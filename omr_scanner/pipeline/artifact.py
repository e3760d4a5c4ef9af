from dataclasses import dataclass
from datetime import datetime

import numpy as np

from omr_scanner.capture.frame import CaptureMethod


@dataclass(frozen=True, slots=True, eq=False)
class CapturedArtifact:
    """Enhanced crop produced by one scan, plus the encoded bytes for export."""

    pixels: np.ndarray  # H x W x 4 RGBA, read-only
    width: int
    height: int
    template_id: str
    capture_method: CaptureMethod
    created_at: datetime
    encoded: bytes
    image_format: str
    grid_rows: int = 0
    grid_cols: int = 0

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def mime_type(self) -> str:
        return f"image/{self.image_format}"

    @property
    def filename(self) -> str:
        extension = "jpg" if self.image_format == "jpeg" else self.image_format
        millis = int(self.created_at.timestamp() * 1000)
        return f"OMR-{self.template_id}-{millis}.{extension}"
