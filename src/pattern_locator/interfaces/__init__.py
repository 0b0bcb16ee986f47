"""
Interfaces module - Abstract contracts for external collaborators.
"""

from pattern_locator.interfaces.probe import IElementProbe

__all__ = [
    "IElementProbe",
]
