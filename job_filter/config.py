from __future__ import annotations

import pathlib
from dataclasses import dataclass, field, fields

import yaml


@dataclass(frozen=True)
class TimingConfig:
    initial_scroll_px: int = 100
    scroll_step_px: int = 500
    settle_delay_ms: int = 600
    final_settle_delay_ms: int = 1000
    stable_iterations: int = 3
    max_iterations: int = 50
    light_rescan_delay_ms: int = 200
    page_change_debounce_ms: int = 800
    page_change_scan_delay_ms: int = 1500
    initial_filter_delay_ms: int = 1000
    initial_scan_delay_ms: int = 3000
    status_reset_delay_ms: int = 3000


@dataclass(frozen=True)
class SelectorConfig:
    list_wrapper: str = ".scaffold-layout__list"
    list_header: str = "header"
    container_fallbacks: tuple[str, ...] = (
        ".jobs-search-results-list",
        "ul.GjoAkyOazLcNFWlLoIqzErpRGHIYJlShlaJI",
        '[class*="jobs-search-results"]',
    )
    items: tuple[str, ...] = (
        "li.scaffold-layout__list-item[data-occludable-job-id]",
        "li[data-occludable-job-id]",
    )
    promoted_labels: tuple[str, ...] = (
        'ul.job-card-list__footer-wrapper span[dir="ltr"]',
        ".job-card-container__footer-item span",
        "li.job-card-container__footer-item span",
    )
    promoted_marker: str = "Promoted"
    company_names: tuple[str, ...] = (
        ".artdeco-entity-lockup__subtitle span",
        ".job-card-container__primary-description",
        ".artdeco-entity-lockup__subtitle",
    )
    pagination: tuple[str, ...] = (
        ".jobs-search-pagination__indicator-button",
        ".jobs-search-pagination__button--next",
        ".jobs-search-pagination__button--previous",
        ".jobs-search-pagination",
    )
    counter_anchor: str = ".jobs-search-results-list__header"


@dataclass(frozen=True)
class Config:
    start_url: str = "https://www.linkedin.com/jobs/search/"
    url_scope: str = "/jobs/"
    headless: bool = False
    settings_path: str = "job_filter_settings.yaml"
    timing: TimingConfig = field(default_factory=TimingConfig)
    selectors: SelectorConfig = field(default_factory=SelectorConfig)


def _load_timing(data: dict) -> TimingConfig:
    if not isinstance(data, dict):
        raise ValueError(f"timing must be a YAML mapping, got {type(data).__name__}")
    known = {f.name for f in fields(TimingConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"unknown timing keys: {', '.join(sorted(unknown))}")

    values = {key: int(value) for key, value in data.items()}
    for key, value in values.items():
        if value < 0:
            raise ValueError(f"timing.{key} must be >= 0, got {value}")
    for key in ("scroll_step_px", "max_iterations", "stable_iterations"):
        if key in values and values[key] == 0:
            raise ValueError(f"timing.{key} must be >= 1, got 0")
    return TimingConfig(**values)


def _load_selectors(data: dict) -> SelectorConfig:
    if not isinstance(data, dict):
        raise ValueError(f"selectors must be a YAML mapping, got {type(data).__name__}")
    known = {f.name for f in fields(SelectorConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"unknown selector keys: {', '.join(sorted(unknown))}")

    values: dict = {}
    for key, raw in data.items():
        default = getattr(SelectorConfig, key)
        if isinstance(default, tuple):
            if isinstance(raw, list):
                chain = tuple(str(x) for x in raw if str(x).strip())
            else:
                chain = (str(raw),) if raw else ()
            if not chain:
                raise ValueError(f"selectors.{key} must list at least one selector")
            values[key] = chain
        else:
            if not str(raw).strip():
                raise ValueError(f"selectors.{key} must not be empty")
            values[key] = str(raw)
    return SelectorConfig(**values)


def load_config(path: str) -> Config:
    raw = pathlib.Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config file must be a YAML mapping, got {type(data).__name__}")

    start_url = str(data.get("start_url", Config.start_url))
    url_scope = str(data.get("url_scope", Config.url_scope))
    headless = bool(data.get("headless", Config.headless))
    settings_path = str(data.get("settings_path", Config.settings_path))

    if not start_url.startswith("http"):
        raise ValueError(f"start_url must begin with http, got: {start_url}")
    if not url_scope:
        raise ValueError("url_scope must not be empty")

    timing = _load_timing(data["timing"]) if "timing" in data else TimingConfig()
    selectors = _load_selectors(data["selectors"]) if "selectors" in data else SelectorConfig()

    settings_dir = pathlib.Path(settings_path).parent
    settings_dir.mkdir(parents=True, exist_ok=True)

    return Config(
        start_url=start_url,
        url_scope=url_scope,
        headless=headless,
        settings_path=settings_path,
        timing=timing,
        selectors=selectors,
    )
