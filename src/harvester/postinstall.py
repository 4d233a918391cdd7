"""
Post-install helper for downloading browser binaries.

Playwright ships without browsers; this downloads the engine the harvester
launches (Firefox by default, or whatever HARVEST_BROWSER selects).
"""
import os
import subprocess
import sys
from typing import List, Optional

from harvester.config import BROWSER_TYPES


def engine_for(browser_type: str) -> str:
    """Playwright install target for a configured browser type."""
    return browser_type if browser_type in BROWSER_TYPES else "firefox"


def install_command(browser_type: str) -> List[str]:
    return [sys.executable, "-m", "playwright", "install", engine_for(browser_type)]


def postinstall(browser_type: Optional[str] = None) -> int:
    """
    Run ``playwright install`` for the configured browser.

    Returns:
        Process exit code (0 on success)
    """
    browser_type = browser_type or os.getenv("HARVEST_BROWSER", "firefox")
    engine = engine_for(browser_type)
    print(f"Running 'playwright install {engine}'...")

    try:
        result = subprocess.run(
            install_command(browser_type),
            check=True,
            capture_output=True,
            text=True
        )
        if result.stdout:
            print(result.stdout)
        print(f"{engine} browser installed successfully.")
        return 0
    except subprocess.CalledProcessError as e:
        print(f"Error installing {engine} browser for Playwright: {e}", file=sys.stderr)
        if e.stderr:
            print(e.stderr, file=sys.stderr)
    except FileNotFoundError as e:
        print(f"Error: Could not find Python executable: {e}", file=sys.stderr)

    print(
        "Please run the following command manually:\n"
        f"  python -m playwright install {engine}",
        file=sys.stderr
    )
    return 1


if __name__ == "__main__":
    sys.exit(postinstall())
