"""Tests for container and job card resolution."""

import pytest

from job_filter.config import SelectorConfig
from job_filter.errors import ContainerNotFound
from job_filter.locator import Locator, direct_selector

from fakes import FakeDocument, job_card, results_page


class TestFindContainer:
    @pytest.mark.asyncio
    async def test_element_after_header(self, document):
        locator = Locator(document, SelectorConfig())

        container = await locator.find_container()

        assert container is not None
        assert container.tag is document.soup.select_one("div.jobs-list-scroller")

    @pytest.mark.asyncio
    async def test_scrollable_child_without_header(self):
        html = (
            '<div class="scaffold-layout__list">'
            '<div class="banner">Tips</div>'
            f'<div class="plain"><ul class="job-list">{job_card(1)}</ul></div>'
            "</div>"
        )
        doc = FakeDocument(html)
        locator = Locator(doc, SelectorConfig())

        container = await locator.find_container()

        # the banner neither scrolls nor holds a card
        assert container.tag is doc.soup.select_one("div.plain")

    @pytest.mark.asyncio
    async def test_direct_selector_fallback(self):
        doc = FakeDocument(f'<div class="jobs-search-results-list"><ul>{job_card(1)}</ul></div>')
        locator = Locator(doc, SelectorConfig())

        container = await locator.find_container()

        assert container.tag is doc.soup.select_one(".jobs-search-results-list")

    @pytest.mark.asyncio
    async def test_not_found(self):
        doc = FakeDocument("<div class='feed'>nothing here</div>")
        locator = Locator(doc, SelectorConfig())

        assert await locator.find_container() is None
        with pytest.raises(ContainerNotFound):
            await locator.require_container()

    @pytest.mark.asyncio
    async def test_custom_strategies(self, document):
        locator = Locator(
            document,
            SelectorConfig(),
            container_strategies=[direct_selector("ul.job-list")],
        )

        container = await locator.find_container()

        assert container.tag is document.soup.select_one("ul.job-list")

    @pytest.mark.asyncio
    async def test_requeries_replaced_subtree(self, document):
        locator = Locator(document, SelectorConfig())
        first = await locator.find_container()

        document.soup.select_one("div.jobs-list-scroller").decompose()
        document.soup.select_one("header").insert_after(
            FakeDocument('<section class="new-list"></section>').soup.section
        )
        second = await locator.find_container()

        assert first.tag is not second.tag
        assert second.tag.name == "section"


class TestFindItems:
    @pytest.mark.asyncio
    async def test_order_preserved(self, document):
        locator = Locator(document, SelectorConfig())

        items = await locator.find_items()

        ids = [await item.get_attribute("data-occludable-job-id") for item in items]
        assert ids == ["1", "2", "3", "4"]

    @pytest.mark.asyncio
    async def test_second_selector_used_when_first_is_empty(self):
        doc = FakeDocument(
            '<ul><li data-occludable-job-id="7">a</li><li data-occludable-job-id="8">b</li></ul>'
        )
        locator = Locator(doc, SelectorConfig())

        assert len(await locator.find_items()) == 2

    @pytest.mark.asyncio
    async def test_results_are_not_merged(self):
        doc = FakeDocument(
            "<ul>"
            f"{job_card(1)}"
            '<li data-occludable-job-id="2">bare card</li>'
            "</ul>"
        )
        locator = Locator(doc, SelectorConfig())

        items = await locator.find_items()

        assert len(items) == 1
        assert await items[0].get_attribute("data-occludable-job-id") == "1"

    @pytest.mark.asyncio
    async def test_empty_page(self):
        locator = Locator(FakeDocument(results_page([])), SelectorConfig())

        assert await locator.find_items() == []
