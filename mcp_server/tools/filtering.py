"""Job filter tools: settings, full scans and status, relayed over the bus."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from mcp_server.browser_manager import BrowserManager
from mcp_server.schemas import CompanyNameInput, UpdateSettingsInput
from mcp_server.utils.errors import format_error

logger = logging.getLogger(__name__)

ProgressReporter = Callable[[int, int], Awaitable[None]]


async def update_settings(arguments: dict) -> str:
    """Merge settings into the active ruleset and re-filter visible jobs."""
    try:
        input_data = UpdateSettingsInput(**arguments)
        manager = await BrowserManager.get_instance()
        bus = await manager.ensure_bus()

        result = await bus.handle({"action": "updateSettings", "settings": input_data.to_settings()})
        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("update_settings", e)


async def scan_all_jobs(arguments: dict, report_progress: Optional[ProgressReporter] = None) -> str:
    """Scroll the whole job list, then filter every loaded job."""
    try:
        manager = await BrowserManager.get_instance()
        bus = await manager.ensure_bus()

        async def relay(message: dict) -> None:
            if message.get("action") == "scanProgress" and report_progress is not None:
                await report_progress(message["totalItems"], message["iteration"])

        unsubscribe = bus.subscribe(relay)
        try:
            result = await bus.handle({"action": "scanAllJobs"})
        finally:
            unsubscribe()

        if not result.get("success"):
            logger.warning("scan_all_jobs failed: %s", result.get("reason"))
        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error(
            "scan_all_jobs",
            e,
            "Open a job search results page first; the scan needs the results list."
        )


async def get_status(arguments: dict) -> str:
    """Report the hidden count, scan state and active settings."""
    try:
        manager = await BrowserManager.get_instance()
        bus = await manager.ensure_bus()

        result = await bus.handle({"action": "getStatus"})
        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("get_status", e)


async def add_blocked_company(arguments: dict) -> str:
    try:
        input_data = CompanyNameInput(**arguments)
        manager = await BrowserManager.get_instance()
        bus = await manager.ensure_bus()

        result = await bus.controller.add_blocked_company(input_data.name)
        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("add_blocked_company", e)


async def remove_blocked_company(arguments: dict) -> str:
    try:
        input_data = CompanyNameInput(**arguments)
        manager = await BrowserManager.get_instance()
        bus = await manager.ensure_bus()

        result = await bus.controller.remove_blocked_company(input_data.name)
        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error(
            "remove_blocked_company",
            e,
            "Use get_status to list the blocked companies exactly as stored."
        )
