from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum


class VisibilityMode(str, Enum):
    REMOVE = "remove"
    DIM = "dim"

    @classmethod
    def parse(cls, raw: str | VisibilityMode) -> VisibilityMode:
        if isinstance(raw, VisibilityMode):
            return raw
        value = str(raw).strip().lower()
        # settings written by older panels use "hide" for removal
        if value == "hide":
            return cls.REMOVE
        return cls(value)


class Decision(str, Enum):
    KEEP = "keep"
    HIDE = "hide"


class ItemState(str, Enum):
    UNPROCESSED = "unprocessed"
    VISIBLE = "visible"
    HIDDEN_REMOVE = "hidden-remove"
    HIDDEN_DIM = "hidden-dim"

    @property
    def is_hidden(self) -> bool:
        return self in (ItemState.HIDDEN_REMOVE, ItemState.HIDDEN_DIM)

    @classmethod
    def hidden(cls, mode: VisibilityMode) -> ItemState:
        return cls.HIDDEN_DIM if mode is VisibilityMode.DIM else cls.HIDDEN_REMOVE


class ScanStatus(str, Enum):
    NORMAL = "normal"
    SCANNING = "scanning"
    COMPLETE = "complete"
    ERROR = "error"


def normalize_company_names(names) -> tuple[str, ...]:
    """Trim names, drop blanks and exact duplicates, keep order."""
    seen: list[str] = []
    for raw in names or ():
        name = str(raw).strip()
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


@dataclass(frozen=True)
class Ruleset:
    promoted_filter_enabled: bool = True
    blocked_company_names: tuple[str, ...] = ()
    visibility_mode: VisibilityMode = VisibilityMode.REMOVE

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "blocked_company_names", normalize_company_names(self.blocked_company_names)
        )
        object.__setattr__(self, "visibility_mode", VisibilityMode.parse(self.visibility_mode))

    def replace(self, **changes) -> Ruleset:
        return dataclasses.replace(self, **changes)

    def to_settings(self) -> dict:
        return {
            "promotedFilterEnabled": self.promoted_filter_enabled,
            "blockedCompanyNames": list(self.blocked_company_names),
            "visibilityMode": self.visibility_mode.value,
        }


@dataclass
class ScanSession:
    scroll_cursor: int
    stable_iteration_count: int = 0
    iteration_count: int = 0
    discovered_count: int = 0


@dataclass
class ScanResult:
    success: bool
    total_items: int = 0
    hidden_items: int = 0
    iterations: int = 0
    reason: str = ""

    @classmethod
    def failure(cls, reason: str) -> ScanResult:
        return cls(success=False, reason=reason)

    def to_dict(self) -> dict:
        if not self.success:
            return {"success": False, "reason": self.reason}
        return {
            "success": True,
            "totalItems": self.total_items,
            "hiddenItems": self.hidden_items,
            "iterations": self.iterations,
        }


@dataclass
class FilterContext:
    """Mutable state owned by one controller instance."""

    ruleset: Ruleset = field(default_factory=Ruleset)
    hidden_count: int = 0
    scanning: bool = False
    status: ScanStatus = ScanStatus.NORMAL
