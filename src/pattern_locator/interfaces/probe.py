"""
Probe Interface - Abstract base class for element probing.

The resolution engine never evaluates selectors itself. It hands composed
selector strings to an IElementProbe, which answers existence, visibility
and attribute queries against the live page and can scroll elements into view.

Selectors may be chains joined with ``>>``; a chain means "search only within
the element matched by the previous part" and is evaluated by the probe.

Example:
    >>> from pattern_locator.probes import PlaywrightProbe
    >>> probe = PlaywrightProbe(page)
    >>> await probe.exists("#login >> //input[@name='username']")
    True
"""

from abc import ABC, abstractmethod
from typing import Optional


class IElementProbe(ABC):
    """
    Abstract interface to the browser driver, as seen by the resolver.

    Implementations must be safe to call sequentially from one coroutine;
    the engine never issues concurrent probes against the same page.
    """

    @abstractmethod
    async def exists(self, selector: str) -> bool:
        """
        Check whether at least one element matches the selector.

        Args:
            selector: CSS, XPath or ``>>`` chained selector

        Returns:
            True if the selector matches something in the DOM
        """
        ...

    @abstractmethod
    async def visible(self, selector: str) -> bool:
        """
        Check whether the first element matching the selector is visible.

        Args:
            selector: CSS, XPath or ``>>`` chained selector

        Returns:
            True if the first match is visible
        """
        ...

    @abstractmethod
    async def scroll_into_view(self, selector: str) -> None:
        """
        Scroll the first element matching the selector into view.

        Args:
            selector: CSS, XPath or ``>>`` chained selector
        """
        ...

    @abstractmethod
    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        """
        Read an attribute from the first element matching the selector.

        Args:
            selector: CSS, XPath or ``>>`` chained selector
            name: Attribute name (e.g. ``for`` on a label)

        Returns:
            Attribute value, or None if absent
        """
        ...

    async def count(self, selector: str) -> int:
        """
        Count the elements matching the selector.

        Used only to detect ambiguous matches. Probes that cannot count
        report one match for an existing selector.
        """
        return 1 if await self.exists(selector) else 0
