"""Best-effort capture of listing snapshots for offline debugging.

Capturing never raises: a failed screenshot or HTML dump is logged and
ignored so it cannot disturb the crawl.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)


class Diagnostics:
    """Writes ``<prefix>.<epoch_ms>.png`` and ``.html`` snapshots of a page."""

    def __init__(self, directory: Union[str, Path] = "."):
        self.directory = Path(directory)

    async def capture(self, page, prefix: str) -> List[Path]:
        """Save a full-page screenshot and the page markup.

        Returns:
            Paths that were actually written (possibly empty)
        """
        written: List[Path] = []
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            stamp = int(time.time() * 1000)
            screenshot_path = self.directory / f"{prefix}.{stamp}.png"
            try:
                await page.screenshot(path=str(screenshot_path), full_page=True)
                written.append(screenshot_path)
            except Exception as e:
                logger.debug(f"Screenshot failed for {prefix}: {e}")

            html = await self._content(page)
            if html:
                html_path = self.directory / f"{prefix}.{stamp}.html"
                html_path.write_text(html, encoding="utf-8")
                written.append(html_path)
        except Exception as e:
            logger.debug(f"Diagnostics capture failed for {prefix}: {e}")

        if written:
            logger.info(f"Saved diagnostics: {', '.join(str(p) for p in written)}")
        return written

    async def _content(self, page) -> Optional[str]:
        try:
            return await page.content()
        except Exception as e:
            logger.debug(f"Could not read page content: {e}")
            return None


class NullDiagnostics(Diagnostics):
    """Diagnostics that capture nothing."""

    def __init__(self):
        super().__init__(".")
        self.captured: List[str] = []

    async def capture(self, page, prefix: str) -> List[Path]:
        self.captured.append(prefix)
        return []
