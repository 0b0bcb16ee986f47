"""
Probes module - Browser driver adapters implementing IElementProbe.
"""

from pattern_locator.probes.playwright_probe import PlaywrightProbe

__all__ = [
    "PlaywrightProbe",
]
