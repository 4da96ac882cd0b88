"""Pydantic schemas for tool input validation."""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional


# Navigation tool schemas
class BrowserLaunchInput(BaseModel):
    headless: bool = Field(default=False, description="Launch browser in headless mode")
    viewport_width: int = Field(default=1920, description="Browser viewport width")
    viewport_height: int = Field(default=1080, description="Browser viewport height")


class NavigateInput(BaseModel):
    url: str = Field(description="URL to navigate to")
    wait_until: Literal["load", "domcontentloaded", "networkidle"] = Field(
        default="domcontentloaded",
        description="When to consider navigation complete"
    )


# Filter tool schemas
class UpdateSettingsInput(BaseModel):
    promoted_filter_enabled: Optional[bool] = Field(
        default=None,
        description="Hide promoted jobs"
    )
    blocked_company_names: Optional[List[str]] = Field(
        default=None,
        description="Replace the blocked company list"
    )
    visibility_mode: Optional[Literal["remove", "dim"]] = Field(
        default=None,
        description="Remove hidden jobs from the list or dim them in place"
    )

    def to_settings(self) -> dict:
        settings = {}
        if self.promoted_filter_enabled is not None:
            settings["promotedFilterEnabled"] = self.promoted_filter_enabled
        if self.blocked_company_names is not None:
            settings["blockedCompanyNames"] = self.blocked_company_names
        if self.visibility_mode is not None:
            settings["visibilityMode"] = self.visibility_mode
        return settings


class CompanyNameInput(BaseModel):
    name: str = Field(min_length=1, description="Company name")
