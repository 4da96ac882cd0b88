"""Request/response message bus between control surfaces and the filter.

Requests are plain dicts carrying an ``action``; progress during a full scan
is published separately as ``scanProgress`` messages. Nobody listening is the
normal case when no panel is open, so delivery failures are dropped.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from .controller import JobFilterController
from .errors import MessageDeliveryFailure
from .schemas import (
    GetStatusMessage,
    ScanAllJobsMessage,
    ScanProgressMessage,
    UpdateSettingsMessage,
)

logger = logging.getLogger(__name__)

Listener = Callable[[dict], Any]


class MessageBus:
    def __init__(self, controller: JobFilterController):
        self.controller = controller
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, message: dict) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(message)
                if inspect.isawaitable(result):
                    await result
            except MessageDeliveryFailure:
                logger.debug("no receiver for %s", message.get("action"))
            except Exception as exc:
                logger.debug("listener failed for %s: %s", message.get("action"), exc)

    async def handle(self, message: dict) -> dict:
        action = message.get("action") if isinstance(message, dict) else None
        try:
            if action == "updateSettings":
                request = UpdateSettingsMessage.model_validate(message)
                return await self.controller.update_settings(request.settings)
            if action == "scanAllJobs":
                ScanAllJobsMessage.model_validate(message)
                return await self.scan_all_jobs()
            if action == "getStatus":
                GetStatusMessage.model_validate(message)
                return self.controller.status()
        except ValidationError as exc:
            logger.warning("invalid %s message: %s", action, exc)
            return {"success": False, "reason": f"invalid-message: {exc.error_count()} errors"}
        return {"success": False, "reason": f"unknown-action: {action}"}

    async def scan_all_jobs(self) -> dict:
        async def on_progress(total: int, iteration: int) -> None:
            progress = ScanProgressMessage(total_items=total, iteration=iteration)
            await self.publish(progress.model_dump(by_alias=True))

        result = await self.controller.scan_all(on_progress)
        return result.to_dict()
