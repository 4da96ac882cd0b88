"""Scroll the lazily rendered job list until every card has been loaded.

The list only renders cards near the viewport, so jumping straight to the
bottom under-counts. The loop walks the container down in fixed steps,
waiting after each one, and stops once the cursor is past the end and the
card count has held still for a few iterations, or at a hard iteration cap.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any, Optional

from .classifier import ClassificationEngine
from .config import TimingConfig
from .errors import ContainerNotFound
from .locator import Locator
from .models import Decision, FilterContext, ScanResult, ScanSession
from .timers import Scheduler
from .visibility import VisibilityStateMachine

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Any]

CONTAINER_NOT_FOUND = "container-not-found"


class DiscoveryLoop:
    def __init__(
        self,
        locator: Locator,
        classifier: ClassificationEngine,
        visibility: VisibilityStateMachine,
        context: FilterContext,
        scheduler: Scheduler,
        timing: TimingConfig,
    ):
        self.locator = locator
        self.classifier = classifier
        self.visibility = visibility
        self.context = context
        self.scheduler = scheduler
        self.timing = timing

    async def run(self, on_progress: Optional[ProgressCallback] = None) -> ScanResult:
        await self.visibility.clear_marks()

        try:
            container = await self.locator.require_container()
        except ContainerNotFound as exc:
            logger.error("scan aborted: %s", exc)
            return ScanResult.failure(CONTAINER_NOT_FOUND)

        session = ScanSession(scroll_cursor=self.timing.initial_scroll_px)
        await self._scroll_until_stable(container, session, on_progress)

        # trailing content the stepped walk may have missed
        await container.scroll_to(await container.scroll_height())
        await self.scheduler.sleep(self.timing.final_settle_delay_ms / 1000)

        total, hidden = await self._classify_all()
        await self.visibility.recount()

        logger.info(
            "scan complete: %d of %d jobs hidden after %d iterations",
            hidden, total, session.iteration_count,
        )
        return ScanResult(
            success=True,
            total_items=total,
            hidden_items=hidden,
            iterations=session.iteration_count,
        )

    async def _scroll_until_stable(self, container, session: ScanSession, on_progress) -> None:
        while session.iteration_count < self.timing.max_iterations:
            await container.scroll_to(session.scroll_cursor)
            await self.scheduler.sleep(self.timing.settle_delay_ms / 1000)

            count = len(await self.locator.find_items())
            await self._report(on_progress, count, session.iteration_count)

            scroll_height = await container.scroll_height()
            if count != session.discovered_count:
                session.discovered_count = count
                session.stable_iteration_count = 0
            else:
                session.stable_iteration_count += 1

            session.scroll_cursor += self.timing.scroll_step_px
            session.iteration_count += 1

            if (
                session.scroll_cursor >= scroll_height
                and session.stable_iteration_count >= self.timing.stable_iterations
            ):
                return

        logger.warning(
            "scan hit the %d iteration cap with %d jobs found",
            self.timing.max_iterations, session.discovered_count,
        )

    @staticmethod
    async def _report(on_progress: Optional[ProgressCallback], count: int, iteration: int) -> None:
        if on_progress is None:
            return
        try:
            result = on_progress(count, iteration)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.debug("progress callback failed: %s", exc)

    async def _classify_all(self) -> tuple[int, int]:
        items = await self.locator.find_items()
        ruleset = self.context.ruleset
        hidden = 0
        for item in items:
            decision = await self.classifier.classify(item, ruleset)
            await self.visibility.reconcile(item, decision, ruleset.visibility_mode)
            if decision is Decision.HIDE:
                hidden += 1
        return len(items), hidden
