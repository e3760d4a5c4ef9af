"""Shared pytest configuration and fixtures for the OMR scanner test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from omr_scanner.config import ScannerConfig, SessionSettings
from tests.infrastructure.mocks.capture_device import FakeCaptureDevice


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring a physical camera"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require a physical camera",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fast_config() -> ScannerConfig:
    """Scanner config with cooldowns short enough for unit tests."""
    return ScannerConfig(
        session=SessionSettings(
            start_cooldown_s=0.01,
            switch_cooldown_s=0.01,
            ready_timeout_s=0.2,
        )
    )


@pytest.fixture
def fake_device() -> FakeCaptureDevice:
    return FakeCaptureDevice()


@pytest.fixture
def make_rgba():
    """Factory for solid RGBA frames of a given width and height."""
    def _make(width: int, height: int, value: int = 100, alpha: int = 255) -> np.ndarray:
        frame = np.full((height, width, 4), value, dtype=np.uint8)
        frame[..., 3] = alpha
        return frame
    return _make
