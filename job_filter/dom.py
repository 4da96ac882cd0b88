"""Element and document access over a live Playwright page.

The core modules only talk to the ``Element`` / ``Document`` protocols, so the
same code runs against a browser page or an in-memory fake.
"""

from __future__ import annotations

from typing import Optional, Protocol

from playwright.async_api import ElementHandle, JSHandle, Page


class Element(Protocol):
    async def query_selector(self, selector: str) -> Optional["Element"]: ...

    async def query_selector_all(self, selector: str) -> list["Element"]: ...

    async def text_content(self) -> Optional[str]: ...

    async def get_attribute(self, name: str) -> Optional[str]: ...

    async def set_attribute(self, name: str, value: str) -> None: ...

    async def remove_attribute(self, name: str) -> None: ...

    async def tag_name(self) -> str: ...

    async def next_element_sibling(self) -> Optional["Element"]: ...

    async def children(self) -> list["Element"]: ...

    async def closest(self, selector: str) -> Optional["Element"]: ...

    async def is_scrollable(self) -> bool: ...

    async def scroll_height(self) -> int: ...

    async def scroll_to(self, y: int) -> None: ...


class Document(Protocol):
    async def query_selector(self, selector: str) -> Optional[Element]: ...

    async def query_selector_all(self, selector: str) -> list[Element]: ...

    def url(self) -> str: ...

    async def read_counter(self) -> Optional[str]: ...

    async def render_counter(self, text: Optional[str]) -> None: ...


# Overflowing content, inline overflow:auto or a "scroll" class all count.
_IS_SCROLLABLE_JS = """
el => {
    return el.scrollHeight > el.clientHeight ||
        el.style.overflow === 'auto' ||
        el.style.overflowY === 'auto' ||
        el.classList.toString().includes('scroll');
}
"""

_COUNTER_SELECTOR = ".job-filter-counter"

# Updates the badge in place; only a missing or moved badge is re-created.
_RENDER_COUNTER_JS = """
([text, anchorSelector, counterSelector]) => {
    const existing = document.querySelector(counterSelector);
    if (!text) {
        if (existing) {
            existing.remove();
        }
        return false;
    }
    const anchor = document.querySelector(anchorSelector);
    if (!anchor) {
        return false;
    }
    if (existing && existing.parentElement === anchor) {
        if (existing.textContent !== text) {
            existing.textContent = text;
        }
        return true;
    }
    if (existing) {
        existing.remove();
    }
    const counter = document.createElement('div');
    counter.className = counterSelector.slice(1);
    counter.textContent = text;
    anchor.appendChild(counter);
    return true;
}
"""

_READ_COUNTER_JS = """
(counterSelector) => {
    const counter = document.querySelector(counterSelector);
    return counter ? counter.textContent : null;
}
"""


def _wrap(handle: Optional[JSHandle]) -> Optional["PlaywrightElement"]:
    if handle is None:
        return None
    element = handle.as_element()
    if element is None:
        return None
    return PlaywrightElement(element)


class PlaywrightElement:
    """``Element`` backed by a Playwright ``ElementHandle``."""

    def __init__(self, handle: ElementHandle):
        self.handle = handle

    async def query_selector(self, selector: str) -> Optional["PlaywrightElement"]:
        return _wrap(await self.handle.query_selector(selector))

    async def query_selector_all(self, selector: str) -> list["PlaywrightElement"]:
        found = await self.handle.query_selector_all(selector)
        return [PlaywrightElement(h) for h in found]

    async def text_content(self) -> Optional[str]:
        return await self.handle.text_content()

    async def get_attribute(self, name: str) -> Optional[str]:
        return await self.handle.get_attribute(name)

    async def set_attribute(self, name: str, value: str) -> None:
        await self.handle.evaluate("(el, [n, v]) => el.setAttribute(n, v)", [name, value])

    async def remove_attribute(self, name: str) -> None:
        await self.handle.evaluate("(el, n) => el.removeAttribute(n)", name)

    async def tag_name(self) -> str:
        return await self.handle.evaluate("el => el.tagName.toLowerCase()")

    async def next_element_sibling(self) -> Optional["PlaywrightElement"]:
        return _wrap(await self.handle.evaluate_handle("el => el.nextElementSibling"))

    async def children(self) -> list["PlaywrightElement"]:
        array = await self.handle.evaluate_handle("el => Array.from(el.children)")
        properties = await array.get_properties()
        result = []
        for handle in properties.values():
            wrapped = _wrap(handle)
            if wrapped is not None:
                result.append(wrapped)
        await array.dispose()
        return result

    async def closest(self, selector: str) -> Optional["PlaywrightElement"]:
        return _wrap(await self.handle.evaluate_handle("(el, s) => el.closest(s)", selector))

    async def is_scrollable(self) -> bool:
        return bool(await self.handle.evaluate(_IS_SCROLLABLE_JS))

    async def scroll_height(self) -> int:
        return int(await self.handle.evaluate("el => el.scrollHeight"))

    async def scroll_to(self, y: int) -> None:
        await self.handle.evaluate("(el, y) => { el.scrollTop = y; }", y)


class PlaywrightDocument:
    """``Document`` backed by a Playwright ``Page``."""

    def __init__(self, page: Page, counter_anchor: str = ""):
        self.page = page
        self._counter_anchor = counter_anchor

    async def query_selector(self, selector: str) -> Optional[PlaywrightElement]:
        return _wrap(await self.page.query_selector(selector))

    async def query_selector_all(self, selector: str) -> list[PlaywrightElement]:
        found = await self.page.query_selector_all(selector)
        return [PlaywrightElement(h) for h in found]

    def url(self) -> str:
        return self.page.url

    async def read_counter(self) -> Optional[str]:
        return await self.page.evaluate(_READ_COUNTER_JS, _COUNTER_SELECTOR)

    async def render_counter(self, text: Optional[str]) -> None:
        if not self._counter_anchor:
            return
        await self.page.evaluate(_RENDER_COUNTER_JS, [text, self._counter_anchor, _COUNTER_SELECTOR])
