"""Catalog harvest script - collect item records from a scrolling listing."""

import sys
import signal

from harvester.cli import main


def handle_terminate(signum, frame):
    """Stop on SIGTERM; records already appended to the journal are kept."""
    print("\n\n⚠️  Harvest terminated. Rerun with the same --out to resume.")
    sys.exit(0)


signal.signal(signal.SIGTERM, handle_terminate)


if __name__ == "__main__":
    sys.exit(main())
