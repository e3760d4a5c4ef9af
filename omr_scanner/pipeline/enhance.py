"""Linear contrast/brightness correction followed by a gain stage."""

from __future__ import annotations

import numpy as np

CONTRAST = 1.4
BRIGHTNESS = 10.0
SHARPNESS = 1.1


def correct_channels(values: np.ndarray) -> np.ndarray:
    """Apply the correction to raw channel values, returning clamped uint8."""
    work = np.asarray(values, dtype=np.float32).copy()
    _correct_inplace(work)
    return np.rint(work).astype(np.uint8)


def _correct_inplace(work: np.ndarray) -> None:
    np.multiply(work, CONTRAST, out=work)
    np.add(work, BRIGHTNESS, out=work)
    np.clip(work, 0.0, 255.0, out=work)
    np.multiply(work, SHARPNESS, out=work)
    np.clip(work, 0.0, 255.0, out=work)


def enhance_rgba(pixels: np.ndarray) -> np.ndarray:
    """Return a corrected copy of an H x W x 4 RGBA raster; alpha is preserved."""
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"expected an HxWx4 RGBA raster, got shape {pixels.shape}")

    out = np.array(pixels, dtype=np.uint8, order="C", copy=True)
    rgb = out[..., :3].astype(np.float32)
    _correct_inplace(rgb)
    np.rint(rgb, out=rgb)
    out[..., :3] = rgb.astype(np.uint8)
    return out


__all__ = ["BRIGHTNESS", "CONTRAST", "SHARPNESS", "correct_channels", "enhance_rgba"]
