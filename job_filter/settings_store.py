"""Persisted filter settings.

Settings are a small key-value document::

    promotedFilterEnabled: true
    blockedCompanyNames: [acme, globex]
    visibilityMode: remove

Read and write failures surface as ``StorageUnavailable``; the controller
decides what to fall back to.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Protocol

import yaml
from pydantic import ValidationError

from .errors import StorageUnavailable
from .models import Ruleset
from .schemas import SettingsPayload

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    def load(self) -> Ruleset: ...

    def save(self, ruleset: Ruleset) -> None: ...


def ruleset_from_settings(data: dict, base: Ruleset | None = None) -> Ruleset:
    """Build a ruleset from a (possibly partial) settings mapping."""
    payload = SettingsPayload.model_validate(data)
    return payload.apply_to(base or Ruleset())


class YamlSettingsStore:
    def __init__(self, path: str):
        self.path = pathlib.Path(path)

    def load(self) -> Ruleset:
        if not self.path.exists():
            return Ruleset()
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise StorageUnavailable(f"cannot read settings from {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageUnavailable(
                f"settings file must be a YAML mapping, got {type(data).__name__}"
            )
        try:
            return ruleset_from_settings(data)
        except (ValidationError, ValueError) as exc:
            raise StorageUnavailable(f"invalid settings in {self.path}: {exc}") from exc

    def save(self, ruleset: Ruleset) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(ruleset.to_settings(), sort_keys=False),
                encoding="utf-8",
            )
        except OSError as exc:
            raise StorageUnavailable(f"cannot write settings to {self.path}: {exc}") from exc
        logger.debug("settings saved to %s", self.path)


class MemorySettingsStore:
    def __init__(self, ruleset: Ruleset | None = None):
        self.ruleset = ruleset or Ruleset()
        self.saves = 0

    def load(self) -> Ruleset:
        return self.ruleset

    def save(self, ruleset: Ruleset) -> None:
        self.ruleset = ruleset
        self.saves += 1
