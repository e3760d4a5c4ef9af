import numpy as np
import pytest

from omr_scanner.pipeline.enhance import correct_channels, enhance_rgba


class TestCorrectChannels:
    def test_known_values(self):
        values = np.array([0, 100, 200, 255], dtype=np.uint8)
        assert correct_channels(values).tolist() == [11, 165, 255, 255]

    def test_full_range_stays_in_bounds(self):
        values = np.arange(256, dtype=np.uint8)
        out = correct_channels(values)

        assert out.dtype == np.uint8
        assert out.min() == 11
        assert out.max() == 255
        assert np.all(np.diff(out.astype(np.int16)) >= 0)

    def test_saturated_inputs(self):
        out = correct_channels(np.array([255, 255, 0], dtype=np.uint8))
        assert out.tolist() == [255, 255, 11]


class TestEnhanceRgba:
    def test_alpha_untouched(self, make_rgba):
        pixels = make_rgba(4, 3, value=100, alpha=7)
        out = enhance_rgba(pixels)

        assert np.all(out[..., 3] == 7)
        assert np.all(out[..., :3] == 165)

    def test_input_not_modified(self, make_rgba):
        pixels = make_rgba(4, 3, value=50)
        before = pixels.copy()

        enhance_rgba(pixels)

        assert np.array_equal(pixels, before)

    def test_handles_non_contiguous_views(self, make_rgba):
        pixels = make_rgba(10, 10, value=200)[2:8, 1:9]
        out = enhance_rgba(pixels)

        assert out.shape == (6, 8, 4)
        assert out.flags["C_CONTIGUOUS"]
        assert np.all(out[..., :3] == 255)

    def test_rejects_non_rgba(self):
        with pytest.raises(ValueError):
            enhance_rgba(np.zeros((4, 4, 3), dtype=np.uint8))
