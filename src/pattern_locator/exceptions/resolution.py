"""
Resolution-related exceptions and warnings.
"""

from typing import List, Optional

from pattern_locator.exceptions.base import PatternLocatorError


class ElementNotFoundError(PatternLocatorError):
    """
    No candidate matched after the full retry budget.

    Carries the diagnostic payload needed to report the failed step:
    every candidate tried, the ones that existed but were never visible,
    the elapsed time, the field descriptor and the pattern set.
    """

    def __init__(
        self,
        message: str,
        candidates: Optional[List[str]] = None,
        existing_invisible: Optional[List[str]] = None,
        elapsed_ms: float = 0,
        descriptor: Optional[str] = None,
        pattern_set_id: Optional[str] = None,
        attempts: int = 0,
        cancelled: bool = False,
    ):
        super().__init__(message, {
            "candidates": candidates or [],
            "existing_invisible": existing_invisible or [],
            "elapsed_ms": round(elapsed_ms),
            "descriptor": descriptor,
            "pattern_set_id": pattern_set_id,
            "attempts": attempts,
            "cancelled": cancelled,
        })
        self.candidates = candidates or []
        self.existing_invisible = existing_invisible or []
        self.elapsed_ms = elapsed_ms
        self.descriptor = descriptor
        self.pattern_set_id = pattern_set_id
        self.attempts = attempts
        self.cancelled = cancelled


class AmbiguousMatchWarning(UserWarning):
    """More than one live element matched the winning candidate."""
    pass
