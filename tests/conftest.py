"""
Pytest configuration and fixtures.
"""

from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from pattern_locator.interfaces.probe import IElementProbe


class FakeProbe(IElementProbe):
    """
    In-memory probe that records every call.

    Selectors in ``visible`` exist and are visible; selectors in ``hidden``
    exist but are not visible; everything else does not exist.
    """

    def __init__(
        self,
        visible: Iterable[str] = (),
        hidden: Iterable[str] = (),
        attributes: Optional[Dict[str, Dict[str, str]]] = None,
        counts: Optional[Dict[str, int]] = None,
    ):
        self.visible_selectors = set(visible)
        self.hidden_selectors = set(hidden)
        self.attributes = attributes or {}
        self.counts = counts or {}
        self.calls: List[Tuple[str, str]] = []

    async def exists(self, selector: str) -> bool:
        self.calls.append(("exists", selector))
        return selector in self.visible_selectors or selector in self.hidden_selectors

    async def visible(self, selector: str) -> bool:
        self.calls.append(("visible", selector))
        return selector in self.visible_selectors

    async def scroll_into_view(self, selector: str) -> None:
        self.calls.append(("scroll", selector))

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        self.calls.append(("get_attribute", selector))
        return self.attributes.get(selector, {}).get(name)

    async def count(self, selector: str) -> int:
        self.calls.append(("count", selector))
        if selector in self.counts:
            return self.counts[selector]
        return 1 if selector in self.visible_selectors or selector in self.hidden_selectors else 0

    def probed(self, method: str = "exists") -> List[str]:
        """Selectors passed to one probe method, in call order."""
        return [selector for name, selector in self.calls if name == method]


@pytest.fixture
def fake_probe():
    """Provide the FakeProbe class for building probes per test."""
    return FakeProbe


@pytest.fixture
def login_page():
    """A login page pattern set with sections, locations and labels."""
    from pattern_locator.patterns import PatternSet

    return PatternSet(
        id="loginPage",
        fields={
            "button": "//button[text()='#{fieldName}'];button:has-text('#{fieldName}')",
            "input": "//input[@id='#{forId}'];//input[@name='#{fieldName.lowercase}'];input[placeholder='#{fieldName}']",
            "label": "//label[text()='#{fieldName}']",
            "checkbox": "//input[@type='checkbox'][@name='#{fieldName.lowercase}']",
            "checkbox.fieldSet": "//fieldset[legend='#{fieldName}']//input[@type='checkbox']",
            "link": "//a[text()='#{fieldName}']",
        },
        sections={
            "Login Form": "#login",
            "Remember Me": "div.remember-me",
        },
        locations={
            "Main Content": "main;div#content",
        },
        scroll="div.scrollable",
    )


@pytest.fixture
def registry(login_page):
    """Provide a registry holding the login, home and checkout pattern sets."""
    from pattern_locator.patterns import PatternSet, PatternSetRegistry

    registry = PatternSetRegistry()
    registry.register(login_page)
    registry.register(PatternSet(id="homePage", fields={"button": "//button[text()='#{fieldName}']"}))
    registry.register(PatternSet(id="checkoutPage", fields={"button": "#checkout-#{fieldName.lowercase}"}))
    return registry


@pytest.fixture
def locator_settings():
    """Provide fast-retry locator settings for tests."""
    from pattern_locator.config import LocatorSettings

    return LocatorSettings(
        default_pattern_set="loginPage",
        retry_timeout_ms=200,
        retry_interval_ms=50,
        page_mapping={"/checkout": "checkoutPage", "/home": "homePage"},
    )


@pytest.fixture
def resolver(registry, locator_settings):
    """Provide a resolver over the test registry."""
    from pattern_locator.engine import LocatorResolver

    return LocatorResolver(registry, locator_settings)
