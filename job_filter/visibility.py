"""Per-card processed/hidden/dimmed marking.

State lives on the card itself as data attributes, so a card the host page
throws away takes its state with it:

* ``data-job-filter-state`` - ``visible``, ``hidden-remove`` or ``hidden-dim``
* ``data-job-filter-style`` - the card's inline ``style`` attribute from
  before it was hidden; absent when the card had none
"""

from __future__ import annotations

import logging
from typing import Optional

from .dom import Document, Element
from .models import Decision, FilterContext, ItemState, VisibilityMode

logger = logging.getLogger(__name__)

STATE_ATTR = "data-job-filter-state"
STYLE_ATTR = "data-job-filter-style"

_TREATMENTS = {
    VisibilityMode.REMOVE: "display: none",
    VisibilityMode.DIM: "opacity: 0.3; filter: grayscale(70%)",
}


def _with_treatment(original: Optional[str], treatment: str) -> str:
    base = (original or "").strip().rstrip(";").strip()
    if not base:
        return treatment
    return f"{base}; {treatment}"


def counter_text(hidden_count: int) -> Optional[str]:
    if hidden_count <= 0:
        return None
    return f"{hidden_count} jobs hidden"


class VisibilityStateMachine:
    def __init__(self, document: Document, context: FilterContext):
        self.document = document
        self.context = context

    async def state_of(self, item: Element) -> ItemState:
        raw = await item.get_attribute(STATE_ATTR)
        if not raw:
            return ItemState.UNPROCESSED
        try:
            return ItemState(raw)
        except ValueError:
            return ItemState.UNPROCESSED

    async def apply(self, item: Element, decision: Decision, mode: VisibilityMode) -> ItemState:
        """Process an unprocessed card once; processed cards are left alone."""
        state = await self.state_of(item)
        if state is not ItemState.UNPROCESSED:
            return state

        if decision is Decision.KEEP:
            await item.set_attribute(STATE_ATTR, ItemState.VISIBLE.value)
            return ItemState.VISIBLE

        original = await item.get_attribute("style")
        if original is not None:
            await item.set_attribute(STYLE_ATTR, original)
        await item.set_attribute("style", _with_treatment(original, _TREATMENTS[mode]))
        hidden = ItemState.hidden(mode)
        await item.set_attribute(STATE_ATTR, hidden.value)
        self.context.hidden_count += 1
        return hidden

    async def reconcile(self, item: Element, decision: Decision, mode: VisibilityMode) -> ItemState:
        """Bring a card in line with ``decision`` whatever its current state."""
        state = await self.state_of(item)
        if state.is_hidden:
            if decision is Decision.HIDE:
                return state
            await self.revert(item)
        elif state is ItemState.VISIBLE:
            if decision is Decision.KEEP:
                return state
            await item.remove_attribute(STATE_ATTR)
        return await self.apply(item, decision, mode)

    async def revert(self, item: Element) -> bool:
        state = await self.state_of(item)
        if not state.is_hidden:
            return False

        original = await item.get_attribute(STYLE_ATTR)
        if original is None:
            await item.remove_attribute("style")
        else:
            await item.set_attribute("style", original)
            await item.remove_attribute(STYLE_ATTR)
        await item.remove_attribute(STATE_ATTR)
        self.context.hidden_count = max(0, self.context.hidden_count - 1)
        return True

    async def revert_all(self) -> int:
        reverted = 0
        for item in await self.document.query_selector_all(f"[{STATE_ATTR}^='hidden']"):
            if await self.revert(item):
                reverted += 1
        if reverted:
            logger.info("restored %d hidden jobs", reverted)
        return reverted

    async def clear_marks(self) -> int:
        """Drop ``visible`` markers so those cards get classified again."""
        cleared = 0
        for item in await self.document.query_selector_all(f"[{STATE_ATTR}='visible']"):
            await item.remove_attribute(STATE_ATTR)
            cleared += 1
        return cleared

    async def recount(self) -> int:
        hidden = await self.document.query_selector_all(f"[{STATE_ATTR}^='hidden']")
        self.context.hidden_count = len(hidden)
        # the badge lives under the observed subtree; unchanged text means no write
        text = counter_text(self.context.hidden_count)
        if await self.document.read_counter() != text:
            await self.document.render_counter(text)
        return self.context.hidden_count
