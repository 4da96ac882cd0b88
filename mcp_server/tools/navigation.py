"""Navigation tools for the filtered browser page."""

from __future__ import annotations

import json
import logging
from mcp_server.browser_manager import BrowserManager
from mcp_server.schemas import BrowserLaunchInput, NavigateInput
from mcp_server.utils.errors import format_error

logger = logging.getLogger(__name__)


async def browser_launch(arguments: dict) -> str:
    """Launch Chromium with the job filter attached."""
    try:
        input_data = BrowserLaunchInput(**arguments)
        manager = await BrowserManager.get_instance()

        result = await manager.launch(
            headless=input_data.headless,
            viewport_width=input_data.viewport_width,
            viewport_height=input_data.viewport_height
        )

        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("browser_launch", e)


async def navigate(arguments: dict) -> str:
    """Navigate the filtered page to a URL."""
    try:
        input_data = NavigateInput(**arguments)
        manager = await BrowserManager.get_instance()
        page = await manager.ensure_page()

        response = await page.goto(
            input_data.url,
            wait_until=input_data.wait_until,
            timeout=60000
        )

        url = page.url
        result = {
            "status": "success",
            "title": await page.title(),
            "url": url,
            "http_status": response.status if response else "unknown",
            "message": f"Successfully navigated to {url}"
        }

        if manager.config.url_scope not in url:
            logger.warning("navigated outside %s: %s", manager.config.url_scope, url)
            result["warning"] = (
                f"URL is outside {manager.config.url_scope}; "
                "jobs will not be filtered on this page."
            )

        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("navigate", e, "Check if the URL is valid and accessible.")


async def browser_close(arguments: dict) -> str:
    """Close the browser and cleanup resources."""
    try:
        manager = await BrowserManager.get_instance()
        result = await manager.close()

        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("browser_close", e)
