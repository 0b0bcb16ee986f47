"""
Engine module - The locator resolution pipeline.

Components:
- FieldDescriptorParser: Parse "{{location}} {section} field[N]" strings
- PageContextResolver: Pick the active pattern set
- PlaceholderSubstitutionEngine: Expand templates into candidates
- CandidateChainBuilder: Compose location >> section >> field chains
- ResolutionExecutor: Probe candidates in priority order
- RetryScrollController: Retry with scrolling until the timeout
- LocatorCache / StaticOverrideTable: Memoize and override selectors
- LocatorResolver: Wires everything together
"""

from pattern_locator.engine.descriptor import (
    FieldDescriptor,
    FieldDescriptorParser,
    parse_field,
)
from pattern_locator.engine.page_context import PageContextResolver
from pattern_locator.engine.substitution import (
    PlaceholderSubstitutionEngine,
    RuntimeVariableBindings,
    RECOGNIZED_TOKENS,
)
from pattern_locator.engine.chain_builder import (
    CandidateChainBuilder,
    ResolvedLocator,
    apply_instance,
)
from pattern_locator.engine.executor import ResolutionExecutor, ProbeResult
from pattern_locator.engine.retry_controller import RetryScrollController
from pattern_locator.engine.cache import CacheKey, LocatorCache, StaticOverrideTable
from pattern_locator.engine.resolver import (
    LocatorResolver,
    ResolutionRequest,
    ResolutionContext,
    raw_selector,
)

__all__ = [
    "FieldDescriptor",
    "FieldDescriptorParser",
    "parse_field",
    "PageContextResolver",
    "PlaceholderSubstitutionEngine",
    "RuntimeVariableBindings",
    "RECOGNIZED_TOKENS",
    "CandidateChainBuilder",
    "ResolvedLocator",
    "apply_instance",
    "ResolutionExecutor",
    "ProbeResult",
    "RetryScrollController",
    "CacheKey",
    "LocatorCache",
    "StaticOverrideTable",
    "LocatorResolver",
    "ResolutionRequest",
    "ResolutionContext",
    "raw_selector",
]
