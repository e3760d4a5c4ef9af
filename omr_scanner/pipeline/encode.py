from dataclasses import dataclass

import cv2
import numpy as np

from omr_scanner.capture.frame import CaptureMethod
from omr_scanner.core.errors import EncodeError

PNG_COMPRESSION = 3
JPEG_QUALITY = 95


@dataclass(frozen=True, slots=True)
class EncodedImage:
    data: bytes
    image_format: str


def encode_rgba(pixels: np.ndarray, method: CaptureMethod) -> EncodedImage:
    """Snapshots are stored lossless (PNG); video-buffer frames as high quality JPEG."""
    try:
        if method is CaptureMethod.SNAPSHOT:
            bgra = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
            ok, buf = cv2.imencode(".png", bgra, [int(cv2.IMWRITE_PNG_COMPRESSION), PNG_COMPRESSION])
            image_format = "png"
        else:
            bgr = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGR)
            ok, buf = cv2.imencode(".jpg", bgr, [int(cv2.IMWRITE_JPEG_QUALITY), JPEG_QUALITY])
            image_format = "jpeg"
    except cv2.error as exc:
        raise EncodeError(f"OpenCV could not encode {pixels.shape} raster: {exc}") from exc

    if not ok:
        raise EncodeError(f"OpenCV refused to encode {pixels.shape} raster as {method.value}")
    return EncodedImage(data=buf.tobytes(), image_format=image_format)
