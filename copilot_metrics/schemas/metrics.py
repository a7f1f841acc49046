from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for records read from the metrics export; extra fields are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class PluginVersion(WireModel):
    sampled_at: str = ""
    plugin: str = ""
    plugin_version: str = ""


class IdeVersion(WireModel):
    sampled_at: str = ""
    ide_version: str = ""


class ActivityCounts(WireModel):
    code_generation_activity_count: int = Field(default=0, ge=0)
    code_acceptance_activity_count: int = Field(default=0, ge=0)
    loc_suggested_to_add_sum: int = Field(default=0, ge=0)
    loc_suggested_to_delete_sum: int = Field(default=0, ge=0)
    loc_added_sum: int = Field(default=0, ge=0)
    loc_deleted_sum: int = Field(default=0, ge=0)


class TotalsByIde(ActivityCounts):
    ide: str = Field(..., description="Editor identifier as reported, e.g. 'vscode'.")
    user_initiated_interaction_count: int = Field(default=0, ge=0)
    last_known_plugin_version: Optional[PluginVersion] = None
    last_known_ide_version: Optional[IdeVersion] = None


class TotalsByFeature(ActivityCounts):
    feature: str = Field(..., description="Feature identifier, e.g. 'code_completion'.")
    user_initiated_interaction_count: int = Field(default=0, ge=0)


class TotalsByLanguageFeature(ActivityCounts):
    language: str
    feature: str


class TotalsByLanguageModel(ActivityCounts):
    language: str
    model: str


class UsageRecord(WireModel):
    """One usage observation for a single user on a single day."""

    report_start_day: str = ""
    report_end_day: str = ""
    day: str = Field(..., description="ISO date (YYYY-MM-DD) of the observation.")
    enterprise_id: str = ""
    user_id: int = 0
    user_login: str
    user_initiated_interaction_count: int = Field(default=0, ge=0)
    code_generation_activity_count: int = Field(default=0, ge=0)
    code_acceptance_activity_count: int = Field(default=0, ge=0)
    totals_by_ide: List[TotalsByIde] = Field(default_factory=list)
    totals_by_feature: List[TotalsByFeature] = Field(default_factory=list)
    totals_by_language_feature: List[TotalsByLanguageFeature] = Field(default_factory=list)
    totals_by_language_model: Optional[List[TotalsByLanguageModel]] = None


class ViewModel(BaseModel):
    """Base for aggregate views; instances are read-only snapshots."""

    model_config = ConfigDict(frozen=True)


class UserSummary(ViewModel):
    user_login: str
    user_id: int
    total_interactions: int
    total_code_generated: int
    total_code_accepted: int
    acceptance_rate: int
    active_days: int = Field(..., description="Number of records seen for the user, not distinct days.")
    last_active_day: str
    primary_ide: str = Field(..., description="Editor of the user's first-seen record.")
    loc_added: int
    loc_suggested: int


class DailyMetrics(ViewModel):
    day: str
    active_users: int
    total_interactions: int
    total_code_generated: int
    total_code_accepted: int
    acceptance_rate: int


class FeatureMetrics(ViewModel):
    feature: str
    interactions: int
    code_generated: int
    code_accepted: int
    acceptance_rate: int


class IdeMetrics(ViewModel):
    ide: str
    users: int
    interactions: int
    code_generated: int
    code_accepted: int


class LanguageMetrics(ViewModel):
    language: str
    code_generated: int
    code_accepted: int
    acceptance_rate: int


class GlobalStats(ViewModel):
    total_users: int = 0
    total_interactions: int = 0
    total_code_generated: int = 0
    total_code_accepted: int = 0
    average_acceptance_rate: int = 0
    report_start_day: str = ""
    report_end_day: str = ""
    total_loc_added: int = 0
    total_loc_suggested: int = 0
