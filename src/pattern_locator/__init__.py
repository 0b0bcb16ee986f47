"""
Pattern Locator - Resolve semantic field names to UI selectors.

Test authors write "Username" or "{Login Form} Submit" instead of raw
selectors. Configured pattern sets turn these into ordered selector
candidates, which are probed against the live page until one matches
a visible element.

Example:
    >>> from pattern_locator import LocatorResolver, load_config
    >>> from pattern_locator.probes import PlaywrightProbe
    >>> resolver = LocatorResolver.from_settings(load_config())
    >>> selector = await resolver.resolve(PlaywrightProbe(page), "button", "Submit",
    ...                                   current_url=page.url)
"""

__version__ = "0.1.0"

# Public API exports
from pattern_locator.config import Settings, LocatorSettings, load_config
from pattern_locator.engine import (
    FieldDescriptor,
    LocatorResolver,
    ResolutionRequest,
    parse_field,
)
from pattern_locator.patterns import PatternSet, PatternSetRegistry
from pattern_locator.interfaces import IElementProbe
from pattern_locator.exceptions import (
    PatternLocatorError,
    ConfigurationError,
    ParseError,
    ElementNotFoundError,
    AmbiguousMatchWarning,
)

__all__ = [
    "Settings",
    "LocatorSettings",
    "load_config",
    "FieldDescriptor",
    "LocatorResolver",
    "ResolutionRequest",
    "parse_field",
    "PatternSet",
    "PatternSetRegistry",
    "IElementProbe",
    "PatternLocatorError",
    "ConfigurationError",
    "ParseError",
    "ElementNotFoundError",
    "AmbiguousMatchWarning",
    "__version__",
]
