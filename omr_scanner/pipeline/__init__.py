from .artifact import CapturedArtifact
from .encode import EncodedImage, encode_rgba
from .enhance import BRIGHTNESS, CONTRAST, SHARPNESS, correct_channels, enhance_rgba
from .extract import extract_region
from .geometry import (
    ASPECT_TOLERANCE,
    MIN_RESOLUTION,
    UNIFORM_PADDING,
    CropRect,
    compute_crop,
    matches_target_aspect,
    output_size,
    scale_factor,
)

__all__ = [
    "ASPECT_TOLERANCE",
    "BRIGHTNESS",
    "CONTRAST",
    "CapturedArtifact",
    "CropRect",
    "EncodedImage",
    "MIN_RESOLUTION",
    "SHARPNESS",
    "UNIFORM_PADDING",
    "compute_crop",
    "correct_channels",
    "encode_rgba",
    "enhance_rgba",
    "extract_region",
    "matches_target_aspect",
    "output_size",
    "scale_factor",
]
