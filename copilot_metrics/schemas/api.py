from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .metrics import UsageRecord, UserSummary


class LoadRequest(BaseModel):
    path: Optional[str] = Field(
        default=None,
        description="URL or local path of an NDJSON export. Defaults to the configured metrics path.",
    )


class LoadTextRequest(BaseModel):
    text: str = Field(..., description="Raw NDJSON text, one record per line.")


class LoadStatus(BaseModel):
    loading: bool = False
    error: Optional[str] = None
    is_data_loaded: bool = False
    record_count: int = 0


class UserDetail(BaseModel):
    summary: UserSummary
    records: List[UsageRecord] = Field(default_factory=list)


class ChartDataset(BaseModel):
    label: str = ""
    data: List[Union[int, float]] = Field(default_factory=list)


class ChartData(BaseModel):
    labels: List[str] = Field(default_factory=list)
    datasets: List[ChartDataset] = Field(default_factory=list)
