"""
Playwright Probe - Implementation of IElementProbe using Playwright.

Selectors are handed to ``page.locator()`` as-is, so Playwright evaluates
CSS, XPath, ``>>`` chains and ``nth=`` qualifiers natively.
"""

from typing import Any, Optional
import logging

from pattern_locator.interfaces.probe import IElementProbe

logger = logging.getLogger(__name__)


class PlaywrightProbe(IElementProbe):
    """
    Playwright implementation of IElementProbe.

    Wraps a Playwright async ``Page``.

    Example:
        >>> async with async_playwright() as p:
        ...     browser = await p.chromium.launch()
        ...     page = await browser.new_page()
        ...     probe = PlaywrightProbe(page)
        ...     await probe.visible("#login")
    """

    def __init__(self, page: Any, action_timeout_ms: int = 1000):
        """
        Initialize the probe.

        Args:
            page: Playwright Page
            action_timeout_ms: Timeout for scroll and attribute reads
        """
        self._page = page
        self.action_timeout_ms = action_timeout_ms

    @property
    def page(self) -> Any:
        return self._page

    @property
    def url(self) -> str:
        return self._page.url

    async def count(self, selector: str) -> int:
        if self._page.is_closed():
            logger.warning("Cannot probe: page is already closed")
            return 0
        return await self._page.locator(selector).count()

    async def exists(self, selector: str) -> bool:
        return await self.count(selector) > 0

    async def visible(self, selector: str) -> bool:
        if self._page.is_closed():
            return False
        return await self._page.locator(selector).first.is_visible()

    async def scroll_into_view(self, selector: str) -> None:
        if self._page.is_closed():
            logger.warning("Cannot scroll: page is already closed")
            return
        await self._page.locator(selector).first.scroll_into_view_if_needed(
            timeout=self.action_timeout_ms
        )

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        if self._page.is_closed():
            return None
        return await self._page.locator(selector).first.get_attribute(
            name, timeout=self.action_timeout_ms
        )
