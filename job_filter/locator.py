"""Resolve the scrollable job list and its cards on the live page.

Nothing is cached: the host page swaps the whole list subtree on pagination,
so every call starts from the document again.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Optional

from .config import SelectorConfig
from .dom import Document, Element
from .errors import ContainerNotFound

logger = logging.getLogger(__name__)

ContainerStrategy = Callable[[Document], Awaitable[Optional[Element]]]


def after_header(wrapper_selector: str, header_selector: str) -> ContainerStrategy:
    """List wrapper -> header child -> the element right after it."""

    async def strategy(document: Document) -> Optional[Element]:
        wrapper = await document.query_selector(wrapper_selector)
        if wrapper is None:
            return None
        header = await wrapper.query_selector(header_selector)
        if header is None:
            return None
        return await header.next_element_sibling()

    return strategy


def scrollable_child(
    wrapper_selector: str,
    header_tag: str,
    item_selectors: Sequence[str],
) -> ContainerStrategy:
    """First non-header child of the wrapper that scrolls or holds a card."""

    async def strategy(document: Document) -> Optional[Element]:
        wrapper = await document.query_selector(wrapper_selector)
        if wrapper is None:
            return None
        for child in await wrapper.children():
            if await child.tag_name() == header_tag:
                continue
            if await child.is_scrollable():
                return child
            for selector in item_selectors:
                if await child.query_selector(selector) is not None:
                    return child
        return None

    return strategy


def direct_selector(selector: str) -> ContainerStrategy:
    async def strategy(document: Document) -> Optional[Element]:
        return await document.query_selector(selector)

    return strategy


def default_container_strategies(selectors: SelectorConfig) -> list[ContainerStrategy]:
    strategies = [
        after_header(selectors.list_wrapper, selectors.list_header),
        scrollable_child(selectors.list_wrapper, selectors.list_header, selectors.items),
    ]
    strategies.extend(direct_selector(s) for s in selectors.container_fallbacks)
    return strategies


class Locator:
    def __init__(
        self,
        document: Document,
        selectors: SelectorConfig,
        container_strategies: Optional[list[ContainerStrategy]] = None,
    ):
        self.document = document
        self.item_selectors = tuple(selectors.items)
        if container_strategies is None:
            container_strategies = default_container_strategies(selectors)
        self.container_strategies = list(container_strategies)

    async def find_container(self) -> Optional[Element]:
        for index, strategy in enumerate(self.container_strategies):
            container = await strategy(self.document)
            if container is not None:
                logger.debug("jobs container resolved by strategy #%d", index)
                return container
        return None

    async def require_container(self) -> Element:
        container = await self.find_container()
        if container is None:
            raise ContainerNotFound(tried=len(self.container_strategies))
        return container

    async def find_items(self) -> list[Element]:
        # first selector with any match wins; results are never merged
        for selector in self.item_selectors:
            found = await self.document.query_selector_all(selector)
            if found:
                return list(found)
        return []
