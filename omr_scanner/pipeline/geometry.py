"""Crop rectangle and output size computation."""

from __future__ import annotations

from dataclasses import dataclass

from omr_scanner.core.errors import DegenerateCropError
from omr_scanner.templates import Template

# Tunable policy: how close H/W must be to the template aspect before the
# whole frame (minus a margin) is treated as the sheet.
ASPECT_TOLERANCE = 0.1
UNIFORM_PADDING = 0.05
# Long-side quality floor for the output raster.
MIN_RESOLUTION = 1600


@dataclass(frozen=True, slots=True)
class CropRect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def fits_within(self, frame_width: int, frame_height: int) -> bool:
        return (
            self.x >= 0
            and self.y >= 0
            and self.right <= frame_width
            and self.bottom <= frame_height
        )


def matches_target_aspect(frame_width: int, frame_height: int, template: Template) -> bool:
    aspect = frame_height / frame_width
    return abs(aspect - template.target_aspect_ratio) < ASPECT_TOLERANCE


def compute_crop(frame_width: int, frame_height: int, template: Template) -> CropRect:
    """Return the region of a ``frame_width`` x ``frame_height`` frame to keep.

    Frames already shaped like the sheet keep everything but a uniform margin;
    others get the template's centered percentage box. Raises
    DegenerateCropError for empty frames, out-of-range percentages, or a
    rectangle that rounds to zero area.
    """
    if frame_width <= 0 or frame_height <= 0:
        raise DegenerateCropError(f"source frame is {frame_width}x{frame_height}")

    for pct in (template.crop_width_pct, template.crop_height_pct):
        if not 0 < pct <= 100:
            raise DegenerateCropError(
                f"template '{template.id}' crop percentage {pct} outside (0, 100]"
            )

    if matches_target_aspect(frame_width, frame_height, template):
        x = round(frame_width * UNIFORM_PADDING)
        y = round(frame_height * UNIFORM_PADDING)
        width = frame_width - 2 * x
        height = frame_height - 2 * y
    else:
        width = min(frame_width, round(frame_width * template.crop_width_pct / 100))
        height = min(frame_height, round(frame_height * template.crop_height_pct / 100))
        x = (frame_width - width) // 2
        y = (frame_height - height) // 2

    rect = CropRect(x, y, width, height)
    if rect.width <= 0 or rect.height <= 0:
        raise DegenerateCropError(
            f"crop {rect.width}x{rect.height} of {frame_width}x{frame_height} frame has no area"
        )
    if not rect.fits_within(frame_width, frame_height):
        raise DegenerateCropError(f"crop {rect} exceeds {frame_width}x{frame_height} frame")
    return rect


def scale_factor(rect: CropRect, min_resolution: int = MIN_RESOLUTION) -> float:
    return max(1.0, min_resolution / max(rect.width, rect.height))


def output_size(rect: CropRect, scale: float) -> tuple[int, int]:
    return max(1, round(rect.width * scale)), max(1, round(rect.height * scale))


__all__ = [
    "ASPECT_TOLERANCE",
    "MIN_RESOLUTION",
    "UNIFORM_PADDING",
    "CropRect",
    "compute_crop",
    "matches_target_aspect",
    "output_size",
    "scale_factor",
]
