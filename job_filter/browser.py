"""Chromium launch and the page-side bridge for DOM mutations and clicks."""

from __future__ import annotations

import inspect
import logging
import os
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

from playwright.async_api import Browser, BrowserContext, JSHandle, Page, async_playwright

from .config import Config
from .controller import JobFilterController
from .dom import Element, PlaywrightDocument, PlaywrightElement
from .settings_store import SettingsStore

logger = logging.getLogger(__name__)

# Realistic Chrome user-agent (kept current)
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# Mask the automation fingerprint the job board checks for
_STEALTH_JS = """
() => {
    Object.defineProperty(navigator, 'webdriver', { get: () => false });
    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en'],
    });
    window.chrome = { runtime: {} };
}
"""

# Relays childList mutations and every click target back into Python.
# Guarded so a second evaluation on the same document is a no-op.
_BRIDGE_JS = """
() => {
    if (window.__jobFilterBridgeInstalled) {
        return;
    }
    window.__jobFilterBridgeInstalled = true;

    const observe = () => {
        const observer = new MutationObserver(() => {
            window.__jobFilterDomChanged();
        });
        observer.observe(document.body, { childList: true, subtree: true });
    };
    if (document.body) {
        observe();
    } else {
        document.addEventListener('DOMContentLoaded', observe, { once: true });
    }

    document.addEventListener('click', (e) => {
        window.__jobFilterClick(e.target);
    }, { passive: true, capture: true });
}
"""

DOM_CHANGED_BINDING = "__jobFilterDomChanged"
CLICK_BINDING = "__jobFilterClick"


def _find_chromium_executable() -> Optional[str]:
    """Find a Chromium build under PLAYWRIGHT_BROWSERS_PATH, if one is set."""
    browsers_path = os.environ.get("PLAYWRIGHT_BROWSERS_PATH")
    if not browsers_path or not os.path.isdir(browsers_path):
        return None
    base = Path(browsers_path)
    for pattern in [
        "chromium-*/chrome-linux/chrome",
        "chromium-*/chrome-mac-x64/Google Chrome for Testing.app/Contents/MacOS/Google Chrome for Testing",
        "chromium-*/chrome-mac-arm64/Google Chrome for Testing.app/Contents/MacOS/Google Chrome for Testing",
    ]:
        for p in base.glob(pattern):
            if p.is_file() and os.access(p, os.X_OK):
                return str(p)
    return None


def launch_options(headless: bool) -> dict:
    options = {
        "headless": headless,
        "args": [
            "--disable-blink-features=AutomationControlled",
            "--disable-infobars",
        ],
    }
    executable = _find_chromium_executable()
    if executable:
        options["executable_path"] = executable
    return options


async def new_stealth_context(
    browser: Browser,
    viewport_width: int = 1920,
    viewport_height: int = 1080,
) -> BrowserContext:
    context = await browser.new_context(
        viewport={"width": viewport_width, "height": viewport_height},
        user_agent=DEFAULT_USER_AGENT,
        locale="en-US",
        timezone_id="America/New_York",
        java_script_enabled=True,
    )
    await context.add_init_script(f"({_STEALTH_JS})()")
    return context


@asynccontextmanager
async def open_page(headless: bool) -> AsyncIterator[Page]:
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(**launch_options(headless))
        try:
            context = await new_stealth_context(browser)
            yield await context.new_page()
        finally:
            await browser.close()


class PageBridge:
    """``ChangeSource`` fed by a MutationObserver, a click listener and page loads."""

    def __init__(self, page: Page):
        self.page = page
        self._dom_callbacks: list[Callable[[], Any]] = []
        self._click_callbacks: list[Callable[[Element], Awaitable[Any]]] = []
        self._navigated_callbacks: list[Callable[[], Any]] = []
        self._installed = False

    def on_dom_changed(self, callback: Callable[[], Any]) -> None:
        self._dom_callbacks.append(callback)

    def on_click(self, callback: Callable[[Element], Awaitable[Any]]) -> None:
        self._click_callbacks.append(callback)

    def on_navigated(self, callback: Callable[[], Any]) -> None:
        self._navigated_callbacks.append(callback)

    async def install(self) -> None:
        if self._installed:
            return
        await self.page.expose_binding(DOM_CHANGED_BINDING, self._dom_changed)
        await self.page.expose_binding(CLICK_BINDING, self._clicked, handle=True)
        # survives navigations; the evaluate covers the document already loaded
        await self.page.add_init_script(f"({_BRIDGE_JS})()")
        await self.page.evaluate(_BRIDGE_JS)
        # full loads only; history API navigations arrive as pagination clicks
        self.page.on("load", self._loaded)
        self._installed = True

    def _loaded(self, page: Page) -> None:
        for callback in list(self._navigated_callbacks):
            callback()

    def _dom_changed(self, source: dict) -> None:
        for callback in list(self._dom_callbacks):
            callback()

    async def _clicked(self, source: dict, target: JSHandle) -> None:
        element = target.as_element()
        if element is None:
            return
        wrapped = PlaywrightElement(element)
        for callback in list(self._click_callbacks):
            result = callback(wrapped)
            if inspect.isawaitable(result):
                await result


async def attach_filter(
    page: Page,
    config: Config,
    store: SettingsStore,
) -> tuple[JobFilterController, PageBridge]:
    """Build a controller for ``page``, hook up the bridge and start it."""
    document = PlaywrightDocument(page, counter_anchor=config.selectors.counter_anchor)
    controller = JobFilterController(document, config, store)
    bridge = PageBridge(page)
    await bridge.install()
    await controller.start(bridge)
    return controller, bridge
