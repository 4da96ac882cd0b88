from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from .config import SelectorConfig
from .dom import Element
from .models import Decision, Ruleset


class ClassificationEngine:
    """Decide whether a job card is kept or hidden under a ruleset.

    Read-only: the card is only queried, never touched, so calling
    ``classify`` any number of times on an unchanged card gives the same
    answer.
    """

    def __init__(
        self,
        promoted_label_selectors: Sequence[str],
        company_selectors: Sequence[str],
        promoted_marker: str = "Promoted",
    ):
        self.promoted_label_selectors = tuple(promoted_label_selectors)
        self.company_selectors = tuple(company_selectors)
        self.promoted_marker = promoted_marker

    @classmethod
    def from_selectors(cls, selectors: SelectorConfig) -> ClassificationEngine:
        return cls(
            selectors.promoted_labels,
            selectors.company_names,
            promoted_marker=selectors.promoted_marker,
        )

    async def is_promoted_job(self, item: Element) -> bool:
        # exact match after trim; "Promoted by recruiter" does not count
        for selector in self.promoted_label_selectors:
            for label in await item.query_selector_all(selector):
                text = await label.text_content()
                if text is not None and text.strip() == self.promoted_marker:
                    return True
        return False

    async def company_name(self, item: Element) -> Optional[str]:
        for selector in self.company_selectors:
            element = await item.query_selector(selector)
            if element is None:
                continue
            text = (await element.text_content() or "").strip()
            if text:
                return text
        return None

    async def is_blocked_company(self, item: Element, blocked_names: Sequence[str]) -> bool:
        needles = [name.strip().lower() for name in blocked_names if name.strip()]
        if not needles:
            return False
        for selector in self.company_selectors:
            element = await item.query_selector(selector)
            if element is None:
                continue
            company = (await element.text_content() or "").strip().lower()
            if company and any(needle in company for needle in needles):
                return True
        return False

    async def classify(self, item: Element, ruleset: Ruleset) -> Decision:
        if ruleset.promoted_filter_enabled and await self.is_promoted_job(item):
            return Decision.HIDE
        if await self.is_blocked_company(item, ruleset.blocked_company_names):
            return Decision.HIDE
        return Decision.KEEP
