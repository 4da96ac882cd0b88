"""Singleton owner of the browser, the job page and its filter."""

import os
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from job_filter.browser import PageBridge, attach_filter, launch_options, new_stealth_context
from job_filter.config import Config, load_config
from job_filter.controller import JobFilterController
from job_filter.messaging import MessageBus
from job_filter.settings_store import YamlSettingsStore

DEFAULT_CONFIG_PATH = os.environ.get(
    "JOB_FILTER_CONFIG",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "job_filter", "config.yaml"),
)


class BrowserManager:
    """Singleton manager for the Playwright browser and the attached filter."""

    _instance: Optional['BrowserManager'] = None
    _playwright: Optional[Playwright] = None
    _browser: Optional[Browser] = None
    _context: Optional[BrowserContext] = None
    _page: Optional[Page] = None
    _config: Optional[Config] = None
    _controller: Optional[JobFilterController] = None
    _bridge: Optional[PageBridge] = None
    _bus: Optional[MessageBus] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    async def get_instance(cls) -> 'BrowserManager':
        """Get or create the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = load_config(DEFAULT_CONFIG_PATH)
        return self._config

    async def launch(
        self,
        headless: bool = False,
        viewport_width: int = 1920,
        viewport_height: int = 1080
    ) -> dict:
        """Launch the browser and attach the filter to a fresh page."""
        if self._browser is not None and self._page is not None:
            return {
                "status": "already_running",
                "message": "Browser is already launched and ready.",
                "url": self._page.url if self._page else "about:blank"
            }

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(**launch_options(headless))
        self._context = await new_stealth_context(self._browser, viewport_width, viewport_height)
        self._page = await self._context.new_page()

        store = YamlSettingsStore(self.config.settings_path)
        self._controller, self._bridge = await attach_filter(self._page, self.config, store)
        self._bus = MessageBus(self._controller)

        return {
            "status": "launched",
            "message": f"Browser launched successfully ({'headless' if headless else 'headed'} mode).",
            "viewport": f"{viewport_width}x{viewport_height}"
        }

    async def ensure_page(self) -> Page:
        """Get the current page or raise an error if browser not launched."""
        if self._page is None:
            raise RuntimeError(
                "Browser not launched. Please call browser_launch first."
            )
        return self._page

    async def ensure_bus(self) -> MessageBus:
        """Get the message bus of the attached filter."""
        if self._bus is None:
            raise RuntimeError(
                "Browser not launched. Please call browser_launch first."
            )
        return self._bus

    async def close(self) -> dict:
        """Close the browser and cleanup resources."""
        if self._browser is None:
            return {
                "status": "not_running",
                "message": "Browser is not running."
            }

        if self._controller is not None:
            self._controller.stop()

        await self._browser.close()

        if self._playwright:
            await self._playwright.stop()

        self._browser = None
        self._context = None
        self._page = None
        self._playwright = None
        self._controller = None
        self._bridge = None
        self._bus = None

        return {
            "status": "closed",
            "message": "Browser closed successfully."
        }
