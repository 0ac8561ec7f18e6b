"""Diagnostic artifacts for scans that matched no flight cards"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import aiofiles
import orjson
from loguru import logger

from .config import DEFAULT_DEBUG_DIR

log = logger.bind(component="storage")


class DebugArtifactStorage:
    """
    Saves a page capture when extraction comes up empty.

    Zero cards can mean either "no availability" or "the site changed its
    markup"; these files are what lets someone tell the two apart later.
    Uses aiofiles so a slow disk never blocks the event loop.
    """

    def __init__(self, debug_dir: Path = DEFAULT_DEBUG_DIR):
        self.debug_dir = debug_dir

    def base_path(self, origin: str, destination: str, date: str) -> Path:
        return self.debug_dir / f"debug-{origin}-{destination}-{date}"

    async def save_page_capture(
        self,
        page,
        origin: str,
        destination: str,
        date: str,
        tried_selectors: List[str],
    ) -> Optional[Path]:
        """
        Write screenshot, HTML and metadata for one empty scan.

        Args:
            page: Page showing the results that yielded no cards
            origin: Origin airport code
            destination: Destination airport code
            date: Departure date
            tried_selectors: Selectors probed, in order

        Returns:
            Path to the screenshot, or None if nothing could be written
        """
        base = self.base_path(origin, destination, date)
        screenshot_path = base.with_suffix(".png")

        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)

            await page.screenshot(path=str(screenshot_path), full_page=True)

            html = await page.content()
            async with aiofiles.open(base.with_suffix(".html"), "w", encoding="utf-8") as f:
                await f.write(html)

            metadata = {
                "origin": origin,
                "destination": destination,
                "date": date,
                "url": page.url,
                "tried_selectors": tried_selectors,
                "captured_at": datetime.now(timezone.utc).isoformat(),
            }
            async with aiofiles.open(base.with_suffix(".json"), "wb") as f:
                await f.write(orjson.dumps(metadata, option=orjson.OPT_INDENT_2))

        except Exception as e:
            log.warning(f"Could not save debug capture for {origin} → {destination}: {e}")
            return None

        log.info(f"Debug screenshot saved to {screenshot_path}")
        return screenshot_path
