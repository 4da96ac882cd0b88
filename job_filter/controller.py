from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional, Union

from .classifier import ClassificationEngine
from .config import Config
from .discovery import DiscoveryLoop, ProgressCallback
from .dom import Document
from .errors import StorageUnavailable
from .locator import ContainerStrategy, Locator
from .models import FilterContext, ItemState, Ruleset, ScanResult, ScanStatus
from .schemas import SettingsPayload
from .settings_store import SettingsStore
from .timers import AsyncioScheduler, Scheduler
from .visibility import VisibilityStateMachine
from .watcher import ChangeSource, ChangeWatcher

logger = logging.getLogger(__name__)

StatusListener = Callable[[ScanStatus, str], None]

INITIAL_FILTER = "initial-filter"
INITIAL_SCAN = "initial-scan"
FULL_SCAN = "full-scan"
STATUS_RESET = "status-reset"

SCAN_IN_PROGRESS = "scan-in-progress"
SCAN_ERROR = "scan-error"


class JobFilterController:
    """Wires the locator, classifier, visibility marking, discovery loop and
    change watcher around one page and owns their shared state.

    All state lives on ``self.context``; nothing is module-global, so several
    controllers can run side by side.
    """

    def __init__(
        self,
        document: Document,
        config: Config,
        store: SettingsStore,
        scheduler: Optional[Scheduler] = None,
        container_strategies: Optional[list[ContainerStrategy]] = None,
    ):
        self.document = document
        self.config = config
        self.store = store
        self.scheduler = scheduler or AsyncioScheduler()
        self.context = FilterContext()
        self._status_listeners: list[StatusListener] = []
        self._auto_scanning = False

        self.locator = Locator(document, config.selectors, container_strategies)
        self.classifier = ClassificationEngine.from_selectors(config.selectors)
        self.visibility = VisibilityStateMachine(document, self.context)
        self.discovery = DiscoveryLoop(
            self.locator,
            self.classifier,
            self.visibility,
            self.context,
            self.scheduler,
            config.timing,
        )
        self.watcher = ChangeWatcher(
            self.scheduler,
            config.timing,
            config.selectors.pagination,
            on_light_rescan=self.filter_visible,
            on_page_change=self.handle_page_change,
            on_new_document=self.handle_new_document,
        )

    @property
    def ruleset(self) -> Ruleset:
        return self.context.ruleset

    @property
    def hidden_count(self) -> int:
        return self.context.hidden_count

    @property
    def scanning(self) -> bool:
        return self.context.scanning

    # -- lifecycle ---------------------------------------------------------

    async def start(self, source: Optional[ChangeSource] = None) -> None:
        self.context.ruleset = self.load_settings()
        if source is not None:
            self.watcher.attach(source)

        self._schedule_initial_pass()
        logger.info("job filter started on %s", self.document.url())

    def handle_new_document(self) -> None:
        """Start over after a full page load: the old cards and badge are gone."""
        self.scheduler.cancel(FULL_SCAN)
        self.context.hidden_count = 0
        logger.info("new document loaded: %s", self.document.url())
        self._schedule_initial_pass()

    def _schedule_initial_pass(self) -> None:
        url = self.document.url()
        if self.config.url_scope not in url:
            self.scheduler.cancel(INITIAL_FILTER)
            self.scheduler.cancel(INITIAL_SCAN)
            logger.debug("no initial pass outside %s: %s", self.config.url_scope, url)
            return

        timing = self.config.timing
        self.scheduler.schedule_after(
            timing.initial_filter_delay_ms / 1000, INITIAL_FILTER, self.filter_visible
        )
        self.scheduler.schedule_after(
            timing.initial_scan_delay_ms / 1000, INITIAL_SCAN, lambda: self.auto_scan("initial")
        )

    def stop(self) -> None:
        self.watcher.detach()
        for token in (INITIAL_FILTER, INITIAL_SCAN, FULL_SCAN, STATUS_RESET):
            self.scheduler.cancel(token)

    # -- settings ----------------------------------------------------------

    def load_settings(self) -> Ruleset:
        try:
            return self.store.load()
        except StorageUnavailable as exc:
            logger.warning("using default settings: %s", exc)
            return Ruleset()

    def save_settings(self) -> None:
        try:
            self.store.save(self.context.ruleset)
        except StorageUnavailable as exc:
            logger.warning("settings not persisted: %s", exc)

    async def update_settings(self, settings: Union[dict, SettingsPayload]) -> dict:
        if not isinstance(settings, SettingsPayload):
            settings = SettingsPayload.model_validate(settings)
        self.context.ruleset = settings.apply_to(self.context.ruleset)
        self.save_settings()

        # relaxed rules must un-hide immediately, so start from a clean slate
        await self.visibility.revert_all()
        self.context.hidden_count = 0
        await self.visibility.clear_marks()
        await self.filter_visible()
        return {"success": True, "hiddenCount": self.context.hidden_count}

    async def set_promoted_filter(self, enabled: bool) -> dict:
        return await self.update_settings(SettingsPayload(promoted_filter_enabled=enabled))

    async def set_visibility_mode(self, mode: str) -> dict:
        return await self.update_settings({"visibilityMode": mode})

    async def add_blocked_company(self, name: str) -> dict:
        name = name.strip()
        names = self.context.ruleset.blocked_company_names
        if not name or name in names:
            return {"success": False, "hiddenCount": self.context.hidden_count}
        return await self.update_settings(
            SettingsPayload(blocked_company_names=[*names, name])
        )

    async def remove_blocked_company(self, name: str) -> dict:
        names = self.context.ruleset.blocked_company_names
        if name not in names:
            return {"success": False, "hiddenCount": self.context.hidden_count}
        return await self.update_settings(
            SettingsPayload(blocked_company_names=[n for n in names if n != name])
        )

    # -- scanning ----------------------------------------------------------

    async def filter_visible(self) -> int:
        """Light rescan: classify cards not yet processed, without scrolling."""
        ruleset = self.context.ruleset
        newly_hidden = 0
        for item in await self.locator.find_items():
            if await self.visibility.state_of(item) is not ItemState.UNPROCESSED:
                continue
            decision = await self.classifier.classify(item, ruleset)
            state = await self.visibility.apply(item, decision, ruleset.visibility_mode)
            if state.is_hidden:
                newly_hidden += 1
        await self.visibility.recount()
        return newly_hidden

    async def scan_all(self, on_progress: Optional[ProgressCallback] = None) -> ScanResult:
        """Full scan. A request made while another is running is dropped."""
        if self.context.scanning:
            logger.info("full scan already running; request dropped")
            return ScanResult.failure(SCAN_IN_PROGRESS)

        self.context.scanning = True
        try:
            return await self.discovery.run(on_progress)
        except Exception:
            logger.exception("full scan failed")
            return ScanResult.failure(SCAN_ERROR)
        finally:
            self.context.scanning = False

    async def auto_scan(self, scan_type: str = "initial") -> Optional[ScanResult]:
        if self.context.scanning:
            logger.debug("auto-scan (%s) skipped: scan in progress", scan_type)
            # a bus-initiated scan owns the run; drop the "Page changed" status
            if not self._auto_scanning:
                self.set_status(ScanStatus.NORMAL)
            return None

        self.set_status(ScanStatus.SCANNING)
        self._auto_scanning = True
        try:
            result = await self.scan_all(
                lambda total, iteration: self.set_status(ScanStatus.SCANNING, f"{total} jobs")
            )
        finally:
            self._auto_scanning = False
        if result.success:
            logger.info(
                "auto-scan complete (%s): %d/%d jobs hidden",
                scan_type, result.hidden_items, result.total_items,
            )
            self.set_status(ScanStatus.COMPLETE, f"{result.hidden_items} hidden")
        else:
            logger.error("auto-scan failed (%s): %s", scan_type, result.reason)
            self.set_status(ScanStatus.ERROR, result.reason)

        self.scheduler.schedule_after(
            self.config.timing.status_reset_delay_ms / 1000,
            STATUS_RESET,
            lambda: self.set_status(ScanStatus.NORMAL),
        )
        return result

    def handle_page_change(self, source: str) -> None:
        url = self.document.url()
        if self.config.url_scope not in url:
            logger.debug("ignoring %s outside %s: %s", source, self.config.url_scope, url)
            return
        if self.context.scanning:
            logger.debug("ignoring %s: scan in progress", source)
            return

        # the old count belongs to the previous page
        self.context.hidden_count = 0
        self.set_status(ScanStatus.SCANNING, "Page changed")
        self.scheduler.schedule_after(
            self.config.timing.page_change_scan_delay_ms / 1000,
            FULL_SCAN,
            lambda: self.auto_scan("page-change"),
        )

    # -- status ------------------------------------------------------------

    def add_status_listener(self, listener: StatusListener) -> None:
        self._status_listeners.append(listener)

    def set_status(self, status: ScanStatus, text: str = "") -> None:
        self.context.status = status
        for listener in list(self._status_listeners):
            try:
                listener(status, text)
            except Exception as exc:
                logger.debug("status listener failed: %s", exc)

    def status(self) -> dict:
        return {
            "success": True,
            "hiddenCount": self.context.hidden_count,
            "scanning": self.context.scanning,
            "status": self.context.status.value,
            "settings": self.context.ruleset.to_settings(),
        }
