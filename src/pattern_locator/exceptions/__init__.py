"""
Exceptions module - Custom exception hierarchy.

Configuration and parse errors are fatal and never retried;
ElementNotFoundError is raised only after the retry budget is spent.
"""

from pattern_locator.exceptions.base import (
    PatternLocatorError,
    ConfigurationError,
    ParseError,
)
from pattern_locator.exceptions.resolution import (
    ElementNotFoundError,
    AmbiguousMatchWarning,
)

__all__ = [
    "PatternLocatorError",
    "ConfigurationError",
    "ParseError",
    "ElementNotFoundError",
    "AmbiguousMatchWarning",
]
