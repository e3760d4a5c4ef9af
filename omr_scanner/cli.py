import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import aiofiles

from omr_scanner.capture.device import FacingMode
from omr_scanner.capture.opencv_device import OpenCVCaptureDevice
from omr_scanner.config import ScannerConfig, load_config_file_async
from omr_scanner.core.errors import ScannerError
from omr_scanner.core.logging_config import configure_logging
from omr_scanner.core.logging_utils import get_module_logger
from omr_scanner.pipeline.artifact import CapturedArtifact
from omr_scanner.session.manager import CaptureSessionManager
from omr_scanner.templates import default_registry


logger = get_module_logger(__name__)

DEFAULT_CONFIG_PATH = Path("config.txt")
LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="OMR scanner - capture, crop and enhance one answer sheet"
    )

    parser.add_argument(
        "--list-templates",
        action="store_true",
        help="Print the available sheet templates and exit",
    )

    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="Print the cameras OpenCV can open and exit",
    )

    parser.add_argument(
        "--template",
        choices=sorted(default_registry),
        default=None,
        help="Sheet template to extract (default: from config, else standard)",
    )

    parser.add_argument(
        "--facing",
        choices=[mode.value for mode in FacingMode],
        default=None,
        help="Camera to use (default: from config, else rear)",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory where the encoded scan is written (default: ./scans)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="key = value configuration file (default: ./config.txt, skipped if missing)",
    )

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging verbosity (default: info)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Rotating log file path, or 'none' to log to the console only",
    )

    return parser.parse_args(argv)


async def load_cli_config(args: argparse.Namespace) -> ScannerConfig:
    """Config file values, with any explicit CLI flag taking precedence."""
    overrides = {
        "output.directory": args.output_dir,
        "output.default_template": args.template,
        "session.default_facing": args.facing,
        "logging.level": args.log_level,
        "logging.file": args.log_file,
    }
    return await load_config_file_async(args.config, overrides)


async def write_artifact(artifact: CapturedArtifact, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / artifact.filename
    async with aiofiles.open(path, 'wb') as f:
        await f.write(artifact.encoded)
    return path


def print_templates() -> None:
    for template in default_registry.values():
        print(
            f"{template.id:<10} {template.display_name} "
            f"({template.crop_width_pct:g}% x {template.crop_height_pct:g}%, "
            f"{template.grid_rows}x{template.grid_cols} grid)"
        )


async def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    if args.list_templates:
        print_templates()
        return 0

    config = await load_cli_config(args)
    configure_logging(config.logging.level, config.logging.file)

    device = OpenCVCaptureDevice(facing_indices=config.capture.facing_indices)
    manager = CaptureSessionManager(device, config=config)

    try:
        if args.list_devices:
            for descriptor in await manager.list_devices():
                facing = descriptor.facing.value if descriptor.facing else "unassigned"
                print(f"{descriptor.device_id:<10} {descriptor.label} ({facing})")
            return 0

        if not await manager.start():
            logger.error("Camera session did not become active")
            return 1
        artifact = await manager.scan()
        path = await write_artifact(artifact, config.output.directory)
        logger.info("Saved %s scan (%s) to %s", artifact.template_id, artifact.resolution, path)
        print(path)
        return 0
    except ScannerError as exc:
        logger.error("Scan failed: %s", exc)
        return 1
    finally:
        await manager.teardown()


def run(argv: Optional[list[str]] = None) -> int:
    try:
        return asyncio.run(main(argv))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(run())
