"""
Page Context Resolver - Pick the active pattern set for a page.

Priority (first hit wins):
1. Explicit override from the caller
2. URL mapping (exact path match, then longest path prefix)
3. Configured default
"""

from typing import Dict, Optional, Tuple
from urllib.parse import urlsplit
import logging

from pattern_locator.exceptions import ConfigurationError
from pattern_locator.patterns.registry import PatternSetRegistry

logger = logging.getLogger(__name__)


def _normalize_path(path: str) -> str:
    path = path.strip() or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _url_path(url: str) -> str:
    return _normalize_path(urlsplit(url.strip()).path)


class PageContextResolver:
    """
    Resolve the pattern set id for the current page.

    Mapping keys are URL paths (``"/checkout"``) or, when they contain
    ``://``, full URL prefixes. Path keys match on segment boundaries, so
    ``"/check"`` does not match ``"/checkout"``.

    Example:
        >>> resolver = PageContextResolver(registry, {"/checkout": "checkoutPage"}, "homePage")
        >>> resolver.resolve("https://shop.test/checkout")
        'checkoutPage'
    """

    def __init__(
        self,
        registry: PatternSetRegistry,
        page_mapping: Optional[Dict[str, str]] = None,
        default_pattern_set: Optional[str] = None,
    ):
        self.registry = registry
        self.page_mapping = dict(page_mapping or {})
        self.default_pattern_set = default_pattern_set

    def resolve(self, current_url: str = "", explicit_override: Optional[str] = None) -> str:
        """
        Resolve the active pattern set id.

        Args:
            current_url: URL (or path) of the current page
            explicit_override: Pattern set chosen by the caller

        Returns:
            Registered pattern set id

        Raises:
            ConfigurationError: If no source yields a registered id
        """
        if explicit_override and explicit_override.strip():
            pattern_set_id = explicit_override.strip()
            if pattern_set_id not in self.registry:
                raise ConfigurationError(
                    f"Explicit pattern set '{pattern_set_id}' is not registered",
                    {"pattern_set_id": pattern_set_id, "available": self.registry.list_pattern_sets()},
                )
            logger.debug(f"Using explicit pattern set override: {pattern_set_id}")
            return pattern_set_id

        mapped = self.match_url(current_url) if current_url else None
        if mapped:
            url_pattern, pattern_set_id = mapped
            if pattern_set_id in self.registry:
                logger.debug(f"Pattern set '{pattern_set_id}' selected by URL pattern '{url_pattern}'")
                return pattern_set_id
            logger.warning(
                f"URL pattern '{url_pattern}' maps to unregistered pattern set "
                f"'{pattern_set_id}'; falling back to default"
            )

        if self.default_pattern_set and self.default_pattern_set in self.registry:
            logger.debug(f"Using default pattern set: {self.default_pattern_set}")
            return self.default_pattern_set

        raise ConfigurationError(
            "No pattern set found for the current page. "
            "Configure a default pattern set, a page mapping, or pass an override.",
            {
                "current_url": current_url,
                "default_pattern_set": self.default_pattern_set,
                "available": self.registry.list_pattern_sets(),
            },
        )

    def match_url(self, current_url: str) -> Optional[Tuple[str, str]]:
        """
        Find the mapping entry for a URL.

        Returns:
            (url_pattern, pattern_set_id) or None
        """
        path = _url_path(current_url)
        best: Optional[Tuple[str, str]] = None
        best_len = -1

        for url_pattern, pattern_set_id in self.page_mapping.items():
            if "://" in url_pattern:
                if current_url == url_pattern:
                    return url_pattern, pattern_set_id
                if current_url.startswith(url_pattern) and len(url_pattern) > best_len:
                    best, best_len = (url_pattern, pattern_set_id), len(url_pattern)
                continue

            pattern_path = _normalize_path(url_pattern)
            if path == pattern_path:
                return url_pattern, pattern_set_id
            prefix = pattern_path if pattern_path.endswith("/") else pattern_path + "/"
            if path.startswith(prefix) and len(pattern_path) > best_len:
                best, best_len = (url_pattern, pattern_set_id), len(pattern_path)

        return best
