import pytest

from job_filter.config import Config
from job_filter.controller import JobFilterController
from job_filter.settings_store import MemorySettingsStore

from fakes import FakeDocument, VirtualScheduler, job_card, results_page


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def store():
    return MemorySettingsStore()


@pytest.fixture
def document():
    cards = [
        job_card(1, company="ACME Corp"),
        job_card(2, company="Initech", footer="Promoted"),
        job_card(3, company="Globex", footer="Promoted by recruiter"),
        job_card(4, company="Umbrella", style="color: red"),
    ]
    doc = FakeDocument(results_page(cards))
    doc.set_scroll_box("div.jobs-list-scroller", height=400, client_height=600)
    return doc


@pytest.fixture
def controller(document, config, store, scheduler):
    return JobFilterController(document, config, store, scheduler=scheduler)
