"""Tests for the incremental scroll-and-filter loop."""

import itertools

import pytest

from job_filter.classifier import ClassificationEngine
from job_filter.config import SelectorConfig, TimingConfig
from job_filter.discovery import CONTAINER_NOT_FOUND, DiscoveryLoop
from job_filter.locator import Locator
from job_filter.models import FilterContext, ItemState, Ruleset
from job_filter.visibility import VisibilityStateMachine

from fakes import FakeDocument, job_card, results_page

CARD_HEIGHT = 100
CLIENT_HEIGHT = 400
CONTAINER = "div.jobs-list-scroller"


class LazyList:
    """Renders another batch of cards whenever the list is scrolled near its end."""

    def __init__(self, total, batch=5, companies=("Globex",)):
        self.total = total
        self.batch = batch
        self.companies = itertools.cycle(companies)
        self.ids = itertools.count(1)
        self.document = FakeDocument(results_page([]))
        self.box = self.document.set_scroll_box(CONTAINER, height=0, client_height=CLIENT_HEIGHT)
        self.document.on_scroll = self.on_scroll
        self.render(batch)

    def render(self, count):
        remaining = self.total - len(self.document.cards())
        count = min(count, remaining)
        self.document.append_cards(
            [job_card(next(self.ids), company=next(self.companies)) for _ in range(count)]
        )
        self.box.height = len(self.document.cards()) * CARD_HEIGHT

    def on_scroll(self, element, y):
        if y + CLIENT_HEIGHT >= self.box.height - 2 * CARD_HEIGHT:
            self.render(self.batch)


class EndlessList(LazyList):
    """Produces exactly one new card on every scroll, forever."""

    def __init__(self):
        super().__init__(total=10**9, batch=5)

    def on_scroll(self, element, y):
        self.render(1)


def _loop(document, scheduler, ruleset=None, timing=None):
    context = FilterContext(ruleset=ruleset or Ruleset())
    selectors = SelectorConfig()
    loop = DiscoveryLoop(
        Locator(document, selectors),
        ClassificationEngine.from_selectors(selectors),
        VisibilityStateMachine(document, context),
        context,
        scheduler,
        timing or TimingConfig(),
    )
    return loop, context


@pytest.mark.asyncio
async def test_discovers_every_lazy_card(scheduler):
    source = LazyList(total=25)
    loop, _ = _loop(source.document, scheduler)

    result = await loop.run()

    assert result.success
    assert result.total_items == 25
    assert result.hidden_items == 0
    assert result.iterations < 50


@pytest.mark.asyncio
async def test_stops_after_three_stable_iterations(scheduler):
    source = LazyList(total=25)
    loop, _ = _loop(source.document, scheduler)
    progress = []

    result = await loop.run(lambda count, iteration: progress.append(count))

    assert progress[-3:] == [25, 25, 25]
    assert progress[-4] == 25
    assert progress.count(25) == 4


@pytest.mark.asyncio
async def test_progress_reported_every_iteration(scheduler):
    source = LazyList(total=12)
    loop, _ = _loop(source.document, scheduler)
    progress = []

    result = await loop.run(lambda count, iteration: progress.append((count, iteration)))

    assert [iteration for _, iteration in progress] == list(range(result.iterations))


@pytest.mark.asyncio
async def test_scroll_walk_and_delays(scheduler):
    source = LazyList(total=12)
    loop, _ = _loop(source.document, scheduler)

    result = await loop.run()

    stepped = source.document.scroll_log[: result.iterations]
    assert stepped == [100 + 500 * i for i in range(result.iterations)]
    # final jump to the bottom, then the longer settle
    assert source.document.scroll_log[-1] == source.box.height
    assert scheduler.sleeps == [0.6] * result.iterations + [1.0]


@pytest.mark.asyncio
async def test_iteration_cap_on_endless_source(scheduler):
    source = EndlessList()
    loop, _ = _loop(source.document, scheduler)
    progress = []

    result = await loop.run(lambda count, iteration: progress.append(count))

    assert result.success
    assert result.iterations == 50
    assert len(progress) == 50
    assert result.total_items == len(source.document.cards())


@pytest.mark.asyncio
async def test_custom_cap(scheduler):
    source = EndlessList()
    loop, _ = _loop(source.document, scheduler, timing=TimingConfig(max_iterations=5))

    result = await loop.run()

    assert result.iterations == 5


@pytest.mark.asyncio
async def test_container_not_found(scheduler):
    document = FakeDocument("<html><body><p>Sign in to see jobs</p></body></html>")
    loop, _ = _loop(document, scheduler)

    result = await loop.run()

    assert not result.success
    assert result.reason == CONTAINER_NOT_FOUND
    assert result.to_dict() == {"success": False, "reason": "container-not-found"}
    assert scheduler.sleeps == []


@pytest.mark.asyncio
async def test_classifies_final_set(scheduler):
    source = LazyList(total=10, companies=("ACME Corp", "Globex"))
    ruleset = Ruleset(blocked_company_names=("acme",))
    loop, context = _loop(source.document, scheduler, ruleset=ruleset)

    result = await loop.run()

    assert result.to_dict() == {
        "success": True,
        "totalItems": 10,
        "hiddenItems": 5,
        "iterations": result.iterations,
    }
    assert context.hidden_count == 5
    assert source.document.counter_text == "5 jobs hidden"
    states = [card.get("data-job-filter-state") for card in source.document.cards()]
    assert states == ["hidden-remove", "visible"] * 5


@pytest.mark.asyncio
async def test_rerun_does_not_double_count(scheduler):
    source = LazyList(total=10, companies=("ACME Corp", "Globex"))
    loop, context = _loop(source.document, scheduler, ruleset=Ruleset(blocked_company_names=("acme",)))

    first = await loop.run()
    second = await loop.run()

    assert first.hidden_items == second.hidden_items == 5
    assert context.hidden_count == 5
    styles = [card.get("style") for card in source.document.cards()]
    assert styles == ["display: none", None] * 5


@pytest.mark.asyncio
async def test_stale_visible_mark_reclassified(scheduler):
    source = LazyList(total=5, companies=("ACME Corp",))
    loop, context = _loop(source.document, scheduler)
    await loop.run()
    assert context.hidden_count == 0

    context.ruleset = Ruleset(blocked_company_names=("acme",))
    result = await loop.run()

    assert result.hidden_items == 5
    machine = VisibilityStateMachine(source.document, context)
    cards = await source.document.query_selector_all("li[data-occludable-job-id]")
    assert {await machine.state_of(c) for c in cards} == {ItemState.HIDDEN_REMOVE}


@pytest.mark.asyncio
async def test_progress_callback_errors_ignored(scheduler):
    source = LazyList(total=5)
    loop, _ = _loop(source.document, scheduler)

    def explode(count, iteration):
        raise RuntimeError("panel went away")

    result = await loop.run(explode)

    assert result.success
    assert result.total_items == 5
