"""
Locator Resolver - Entry point of the resolution engine.

Turns (current page, element type, field string) into one concrete selector:

    page context -> pattern set
    field string -> FieldDescriptor
    static override / cache
    templates -> composed candidates -> probe with retry and scroll
    winner cached and returned, or ElementNotFoundError

Each worker builds its own resolver (registry snapshot + cache); the current
page is passed per call, never stored globally.

Example:
    >>> resolver = LocatorResolver.from_settings(load_config())
    >>> selector = await resolver.resolve(probe, "input", "{Login Form} Username",
    ...                                   current_url=page.url)
"""

from dataclasses import dataclass
from typing import Optional, Union, TYPE_CHECKING
import logging
import re

from pattern_locator.config.settings import LocatorSettings, Settings
from pattern_locator.engine.cache import CacheKey, LocatorCache, StaticOverrideTable
from pattern_locator.engine.chain_builder import CHAIN_SEPARATOR, CandidateChainBuilder, ResolvedLocator
from pattern_locator.engine.descriptor import FieldDescriptor, FieldDescriptorParser
from pattern_locator.engine.executor import ResolutionExecutor
from pattern_locator.engine.page_context import PageContextResolver
from pattern_locator.engine.retry_controller import RetryScrollController
from pattern_locator.engine.substitution import PlaceholderSubstitutionEngine
from pattern_locator.patterns.loader import PatternSetLoader
from pattern_locator.patterns.registry import PatternSetRegistry

if TYPE_CHECKING:
    from pattern_locator.interfaces.probe import IElementProbe

logger = logging.getLogger(__name__)


RAW_SELECTOR_PREFIX = re.compile(r"^(xpath|css|chain)\s*=\s*", re.IGNORECASE)
BARE_XPATH_PREFIXES = ("//", "(/")


@dataclass
class ResolutionRequest:
    """
    What the step layer asks for.

    Attributes:
        element_type: Element type key ('button', 'checkbox.fieldSet', ...)
        field: Field descriptor string
        explicit_pattern_set: Pattern set chosen by the caller
        field_value: Value bound to ``#{fieldValue}``
        require_visible: False accepts existing-but-hidden elements
        timeout_ms: Overrides the configured retry timeout
    """
    element_type: str
    field: str
    explicit_pattern_set: Optional[str] = None
    field_value: Optional[str] = None
    require_visible: bool = True
    timeout_ms: Optional[int] = None


@dataclass(frozen=True)
class ResolutionContext:
    """State of one resolution call. Owned by the call, never shared."""
    pattern_set_id: str
    element_type: str
    descriptor: FieldDescriptor
    explicit_override: Optional[str] = None
    field_value: Optional[str] = None
    current_url: str = ""


def raw_selector(field: str) -> Optional[str]:
    """
    Detect a field that is already a selector.

    An explicit ``xpath=``, ``css=`` or ``chain=`` prefix is stripped. A bare
    XPath (``//...`` or ``(//...)[N]``) or a ``>>`` chain is returned as-is.

    Returns:
        The raw selector, or None when the field is a field descriptor
    """
    stripped = field.strip()
    match = RAW_SELECTOR_PREFIX.match(stripped)
    if not match:
        if stripped.startswith(BARE_XPATH_PREFIXES) or CHAIN_SEPARATOR.strip() in stripped:
            return stripped
        return None
    selector = stripped[match.end():]
    if selector.startswith("\\"):
        selector = selector[1:]
    return selector.replace("\\/", "/")


class LocatorResolver:
    """
    Resolve semantic field names to selectors.
    """

    def __init__(
        self,
        registry: PatternSetRegistry,
        settings: Optional[LocatorSettings] = None,
        cache: Optional[LocatorCache] = None,
    ):
        self.registry = registry
        self.settings = settings or LocatorSettings()
        self.cache = cache or LocatorCache(StaticOverrideTable(self.settings.static_locators))

        self.parser = FieldDescriptorParser()
        self.page_context = PageContextResolver(
            registry,
            page_mapping=self.settings.page_mapping,
            default_pattern_set=self.settings.default_pattern_set,
        )
        self.executor = ResolutionExecutor()
        self.builder = CandidateChainBuilder(
            registry,
            substitution=PlaceholderSubstitutionEngine(),
            executor=self.executor,
            variables=self.settings.variables,
        )
        self.controller = RetryScrollController(self.executor)

    @classmethod
    def from_settings(
        cls,
        settings: Union[Settings, LocatorSettings],
        loader: Optional[PatternSetLoader] = None,
    ) -> "LocatorResolver":
        """
        Build a resolver from settings, loading pattern files from ``pattern_paths``.
        """
        locator_settings = settings.locator if isinstance(settings, Settings) else settings
        registry = PatternSetRegistry(label_eligible=locator_settings.label_eligible)
        loader = loader or PatternSetLoader()
        registry.register_many(loader.load_paths(locator_settings.pattern_paths))
        logger.info(
            f"Loaded {len(registry)} pattern set(s): {', '.join(registry.list_pattern_sets()) or 'none'}"
        )
        return cls(registry, locator_settings)

    def for_worker(self) -> "LocatorResolver":
        """A resolver with its own registry snapshot and an empty cache."""
        return LocatorResolver(
            self.registry.snapshot(),
            self.settings,
            LocatorCache(self.cache.static_overrides),
        )

    # ==================== Resolution ====================

    async def resolve(
        self,
        probe: "IElementProbe",
        element_type: str,
        field: str,
        *,
        current_url: str = "",
        pattern_set: Optional[str] = None,
        field_value: Optional[str] = None,
        require_visible: bool = True,
        timeout_ms: Optional[int] = None,
    ) -> str:
        """Resolve a field to a selector. See resolve_request()."""
        request = ResolutionRequest(
            element_type=element_type,
            field=field,
            explicit_pattern_set=pattern_set,
            field_value=field_value,
            require_visible=require_visible,
            timeout_ms=timeout_ms,
        )
        return await self.resolve_request(probe, request, current_url=current_url)

    async def resolve_request(
        self,
        probe: "IElementProbe",
        request: ResolutionRequest,
        current_url: str = "",
    ) -> str:
        """
        Resolve a request to a single selector.

        Args:
            probe: Element probe for the live page
            request: Element type, field string and options
            current_url: URL of the current page

        Returns:
            Selector string ready for the browser driver

        Raises:
            ConfigurationError: Static misconfiguration (never retried)
            ParseError: Malformed field string (never retried)
            ElementNotFoundError: No candidate matched within the timeout
        """
        raw = raw_selector(request.field)
        if raw is not None:
            logger.debug(f"Raw selector passthrough: {raw}")
            return raw

        if not self.settings.enable:
            logger.debug(f"Pattern resolution disabled; using field as selector: {request.field}")
            return request.field.strip()

        context = self.create_context(request, current_url)
        key = CacheKey(
            pattern_set_id=context.pattern_set_id,
            element_type=context.element_type,
            descriptor=context.descriptor.normalized(),
            field_value=context.field_value,
            require_visible=request.require_visible,
        )
        static_key = StaticOverrideTable.key_for(context.pattern_set_id, context.element_type, request.field)

        async def compute() -> str:
            return await self._resolve_uncached(probe, context, request)

        return await self.cache.resolve_with_cache(key, compute, static_key=static_key)

    def create_context(self, request: ResolutionRequest, current_url: str = "") -> ResolutionContext:
        """Pick the pattern set and parse the field for one request."""
        element_type = request.element_type.strip()
        pattern_set_id = self.page_context.resolve(current_url, request.explicit_pattern_set)
        descriptor = self.parser.parse(request.field)
        logger.debug(
            f"Resolution context: pattern set '{pattern_set_id}', type '{element_type}', "
            f"field {descriptor.normalized()}"
        )
        return ResolutionContext(
            pattern_set_id=pattern_set_id,
            element_type=element_type,
            descriptor=descriptor,
            explicit_override=request.explicit_pattern_set,
            field_value=request.field_value,
            current_url=current_url,
        )

    async def build_candidates(
        self,
        context: ResolutionContext,
        probe: Optional["IElementProbe"] = None,
    ) -> ResolvedLocator:
        """Compose candidates for a context; label indirection needs a probe."""
        pattern_set = self.registry.get(context.pattern_set_id)
        return await self.builder.build(
            pattern_set,
            context.descriptor,
            context.element_type,
            probe=probe,
            field_value=context.field_value,
        )

    async def explain(self, request: ResolutionRequest, current_url: str = "") -> ResolvedLocator:
        """Composed candidates for a request, without touching a page."""
        return await self.build_candidates(self.create_context(request, current_url))

    async def _resolve_uncached(
        self,
        probe: "IElementProbe",
        context: ResolutionContext,
        request: ResolutionRequest,
    ) -> str:
        locator = await self.build_candidates(context, probe)

        async def refresh() -> ResolvedLocator:
            return await self.build_candidates(context, probe)

        timeout_ms = request.timeout_ms if request.timeout_ms is not None else self.settings.retry_timeout_ms
        return await self.controller.resolve(
            locator.candidates,
            probe,
            locator.scroll_candidates,
            timeout_ms,
            self.settings.retry_interval_ms,
            require_visible=request.require_visible,
            base_candidates=locator.base_candidates,
            descriptor=locator.description,
            pattern_set_id=context.pattern_set_id,
            refresh=refresh if locator.label_pending else None,
        )

    # ==================== Lifecycle ====================

    def invalidate(self, key: CacheKey) -> bool:
        return self.cache.invalidate(key)

    def clear_cache(self) -> None:
        """Scenario-boundary hook: forget every resolved selector."""
        self.cache.clear_all()
