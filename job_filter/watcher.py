"""React to page churn: DOM mutations and pagination clicks.

Both triggers go through the scheduler with a fixed token each, so a burst of
events collapses into a single action fired after the last one.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Optional, Protocol

from .config import TimingConfig
from .dom import Element
from .timers import Scheduler

logger = logging.getLogger(__name__)

LIGHT_RESCAN = "light-rescan"
PAGE_CHANGE = "page-change"


class ChangeSource(Protocol):
    def on_dom_changed(self, callback: Callable[[], Any]) -> None: ...

    def on_click(self, callback: Callable[[Element], Awaitable[Any]]) -> None: ...

    def on_navigated(self, callback: Callable[[], Any]) -> None: ...


class ChangeWatcher:
    def __init__(
        self,
        scheduler: Scheduler,
        timing: TimingConfig,
        pagination_selectors: Sequence[str],
        on_light_rescan: Callable[[], Any],
        on_page_change: Callable[[str], Any],
        on_new_document: Optional[Callable[[], Any]] = None,
    ):
        self.scheduler = scheduler
        self.timing = timing
        self.pagination_selectors = tuple(pagination_selectors)
        self.on_light_rescan = on_light_rescan
        self.on_page_change = on_page_change
        self.on_new_document = on_new_document
        self._attached = False

    def attach(self, source: ChangeSource) -> None:
        source.on_dom_changed(self.notify_mutation)
        source.on_click(self.notify_click)
        source.on_navigated(self.notify_navigation)
        self._attached = True
        logger.info("watching for DOM changes and pagination clicks")

    def detach(self) -> None:
        self._attached = False
        self.scheduler.cancel(LIGHT_RESCAN)
        self.scheduler.cancel(PAGE_CHANGE)

    def notify_mutation(self) -> None:
        if not self._attached:
            return
        self.scheduler.schedule_after(
            self.timing.light_rescan_delay_ms / 1000, LIGHT_RESCAN, self.on_light_rescan
        )

    async def notify_click(self, target: Element) -> None:
        if not self._attached or target is None:
            return
        if await self.is_pagination_click(target):
            self.notify_page_change("pagination-click")

    async def is_pagination_click(self, target: Element) -> bool:
        for selector in self.pagination_selectors:
            if await target.closest(selector) is not None:
                return True
        return False

    def notify_page_change(self, source: str) -> None:
        if not self._attached:
            return
        logger.debug("page change signalled by %s", source)
        self.scheduler.schedule_after(
            self.timing.page_change_debounce_ms / 1000,
            PAGE_CHANGE,
            lambda: self.on_page_change(source),
        )

    def notify_navigation(self) -> None:
        """A new document replaced the old one; pending work targeted the old DOM."""
        if not self._attached:
            return
        self.scheduler.cancel(LIGHT_RESCAN)
        self.scheduler.cancel(PAGE_CHANGE)
        if self.on_new_document is not None:
            self.on_new_document()
