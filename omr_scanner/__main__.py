"""Allow ``python -m omr_scanner`` to run a single scan."""

from __future__ import annotations

import sys


def main() -> None:
    from omr_scanner.cli import run
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
