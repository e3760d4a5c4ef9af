"""Frame -> enhanced, encoded OMR crop."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import cv2

from omr_scanner.capture.frame import RawFrame
from omr_scanner.core.errors import DegenerateCropError
from omr_scanner.core.logging_utils import LoggerLike, ensure_structured_logger
from omr_scanner.templates import Template

from .artifact import CapturedArtifact
from .encode import encode_rgba
from .enhance import enhance_rgba
from .geometry import MIN_RESOLUTION, compute_crop, output_size, scale_factor


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def extract_region(
    frame: RawFrame,
    template: Template,
    *,
    min_resolution: int = MIN_RESOLUTION,
    clock: Callable[[], datetime] = _utc_now,
    logger: LoggerLike = None,
) -> CapturedArtifact:
    """Crop, upscale to the quality floor, enhance and encode one frame.

    Pure with respect to its inputs: the frame is never modified and no state
    is kept between calls.
    """
    log = ensure_structured_logger(logger, fallback_name=__name__)
    data = frame.data
    if data.ndim != 3 or data.shape[2] != 4:
        raise DegenerateCropError(f"expected an HxWx4 RGBA frame, got shape {data.shape}")

    height, width = data.shape[:2]
    rect = compute_crop(width, height, template)
    scale = scale_factor(rect, min_resolution)
    out_w, out_h = output_size(rect, scale)

    region = data[rect.y:rect.bottom, rect.x:rect.right]
    if scale > 1.0:
        region = cv2.resize(region, (out_w, out_h), interpolation=cv2.INTER_LINEAR)

    pixels = enhance_rgba(region)
    encoded = encode_rgba(pixels, frame.method)
    pixels.setflags(write=False)

    log.info(
        "Extracted %s crop %dx%d at (%d,%d) from %dx%d frame -> %dx%d (%s, %s)",
        template.id,
        rect.width,
        rect.height,
        rect.x,
        rect.y,
        width,
        height,
        out_w,
        out_h,
        frame.method.value,
        encoded.image_format,
    )
    return CapturedArtifact(
        pixels=pixels,
        width=out_w,
        height=out_h,
        template_id=template.id,
        capture_method=frame.method,
        created_at=clock(),
        encoded=encoded.data,
        image_format=encoded.image_format,
        grid_rows=template.grid_rows,
        grid_cols=template.grid_cols,
    )


__all__ = ["extract_region"]
