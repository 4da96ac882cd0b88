"""Pydantic schemas for settings and bus messages."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Ruleset, VisibilityMode, normalize_company_names


class SettingsPayload(BaseModel):
    """Partial or complete settings; absent keys leave the ruleset as is."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    promoted_filter_enabled: Optional[bool] = Field(
        default=None,
        alias="promotedFilterEnabled",
        description="Hide jobs labelled as promoted",
    )
    blocked_company_names: Optional[List[str]] = Field(
        default=None,
        alias="blockedCompanyNames",
        description="Company names to hide (case-insensitive substring match)",
    )
    visibility_mode: Optional[VisibilityMode] = Field(
        default=None,
        alias="visibilityMode",
        description="How hidden jobs are shown: removed from layout or dimmed",
    )

    @field_validator("visibility_mode", mode="before")
    @classmethod
    def _parse_mode(cls, value):
        if value is None:
            return None
        return VisibilityMode.parse(value)

    @field_validator("blocked_company_names", mode="before")
    @classmethod
    def _parse_names(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        return list(normalize_company_names(value))

    def apply_to(self, base: Ruleset) -> Ruleset:
        changes = {}
        if self.promoted_filter_enabled is not None:
            changes["promoted_filter_enabled"] = self.promoted_filter_enabled
        if self.blocked_company_names is not None:
            changes["blocked_company_names"] = tuple(self.blocked_company_names)
        if self.visibility_mode is not None:
            changes["visibility_mode"] = self.visibility_mode
        return base.replace(**changes) if changes else base


class UpdateSettingsMessage(BaseModel):
    action: Literal["updateSettings"]
    settings: SettingsPayload = Field(description="Settings to merge into the active ruleset")


class ScanAllJobsMessage(BaseModel):
    action: Literal["scanAllJobs"]


class GetStatusMessage(BaseModel):
    action: Literal["getStatus"]


class ScanProgressMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["scanProgress"] = "scanProgress"
    total_items: int = Field(alias="totalItems", description="Job cards found so far")
    iteration: int = Field(description="Zero-based scroll iteration")

