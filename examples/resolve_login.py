"""
Example: Resolve login form fields

This example opens a login page with Playwright and resolves fields by
their semantic names using the pattern sets in examples/patterns.

    python examples/resolve_login.py https://example.com/login
"""

import asyncio
import sys

from playwright.async_api import async_playwright

from pattern_locator import LocatorResolver, load_config
from pattern_locator.exceptions import ElementNotFoundError
from pattern_locator.probes import PlaywrightProbe
from pattern_locator.utils import setup_logging_from_settings


async def main(url: str):
    """Resolve a few login fields and fill them in."""

    # Load configuration (from env vars, config files, or defaults)
    settings = load_config(config_path="examples/pattern-locator.yaml")
    setup_logging_from_settings(settings.logging)

    resolver = LocatorResolver.from_settings(settings)

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        page = await browser.new_page()
        await page.goto(url)
        probe = PlaywrightProbe(page)

        try:
            username = await resolver.resolve(probe, "input", "{Login Form} Username", current_url=page.url)
            password = await resolver.resolve(probe, "input", "{Login Form} Password", current_url=page.url)
            submit = await resolver.resolve(probe, "button", "{Login Form} Log in", current_url=page.url)
        except ElementNotFoundError as e:
            print(f"Not found: {e.message}")
            for candidate in e.candidates:
                print(f"  tried {candidate}")
            await browser.close()
            return

        await page.fill(username, "demo")
        await page.fill(password, "secret")
        await page.click(submit)
        print(f"Submitted via {submit}")

        # Scenario boundary: forget resolved selectors
        resolver.clear_cache()
        await browser.close()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "https://example.com/login"))
