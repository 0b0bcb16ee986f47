"""
Locator Cache and Static Overrides.

Lookup order for one field:
1. Static override table (literal selectors, never cached)
2. Locator cache (winning selector from an earlier resolution)
3. Full resolution, whose single winning selector is cached

The cache lives for one scenario; the test lifecycle calls ``clear_all()``
at the scenario boundary.
"""

from typing import Awaitable, Callable, Dict, Mapping, NamedTuple, Optional
import logging

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    """Typed cache key for one resolved field."""
    pattern_set_id: str
    element_type: str
    descriptor: str
    field_value: Optional[str] = None
    require_visible: bool = True


class StaticOverrideTable:
    """
    Read-only table of literal selectors keyed ``pageName.elementType.field``.

    A value counts only when it is non-empty and not the key itself (some
    property stores echo the key back for missing entries).
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries: Dict[str, str] = dict(entries or {})

    @staticmethod
    def key_for(pattern_set_id: str, element_type: str, field: str) -> str:
        return f"{pattern_set_id}.{element_type}.{field.strip()}"

    def lookup(self, key: str) -> Optional[str]:
        value = self._entries.get(key)
        if value is None:
            return None
        value = value.strip()
        if not value or value == key:
            return None
        return value

    def __contains__(self, key: str) -> bool:
        return self.lookup(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


class LocatorCache:
    """
    Memoize resolved selectors per scenario.

    Example:
        >>> cache = LocatorCache(StaticOverrideTable({"loginPage.button.Login": "#login"}))
        >>> await cache.resolve_with_cache(key, compute, static_key="loginPage.button.Login")
        '#login'
    """

    def __init__(self, static_overrides: Optional[StaticOverrideTable] = None):
        self.static_overrides = static_overrides or StaticOverrideTable()
        self._entries: Dict[CacheKey, str] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: CacheKey) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: CacheKey, selector: str) -> None:
        self._entries[key] = selector

    def invalidate(self, key: CacheKey) -> bool:
        """Drop one entry. Returns True if it existed."""
        return self._entries.pop(key, None) is not None

    def clear_all(self) -> None:
        """Drop every entry (scenario boundary)."""
        if self._entries:
            logger.debug(f"Clearing {len(self._entries)} cached locator(s)")
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def resolve_with_cache(
        self,
        key: CacheKey,
        compute: Callable[[], Awaitable[str]],
        static_key: Optional[str] = None,
    ) -> str:
        """
        Resolve a selector through the static table, the cache, then compute.

        Args:
            key: Cache key for the field
            compute: Runs the full resolution; returns the winning selector
            static_key: Fully-qualified static override key

        Returns:
            Selector string
        """
        if static_key:
            static = self.static_overrides.lookup(static_key)
            if static is not None:
                logger.debug(f"Static override for {static_key}: {static}")
                return static

        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            logger.debug(f"Cache hit for {key.pattern_set_id}.{key.element_type}: {cached}")
            return cached

        self.misses += 1
        selector = await compute()
        self._entries[key] = selector
        return selector
