"""
Patterns module - Pattern set models, registry and file loading.
"""

from pattern_locator.patterns.models import PatternSet, ElementTypeSpec
from pattern_locator.patterns.registry import PatternSetRegistry, DEFAULT_LABEL_ELIGIBLE
from pattern_locator.patterns.loader import PatternSetLoader

__all__ = [
    "PatternSet",
    "ElementTypeSpec",
    "PatternSetRegistry",
    "DEFAULT_LABEL_ELIGIBLE",
    "PatternSetLoader",
]
