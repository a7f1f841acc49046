import json
from pathlib import Path
from typing import Callable, Dict

import pytest


DATA_PATH = Path(__file__).resolve().parent.parent / "resources" / "data" / "metrics.ndjson"


@pytest.fixture
def sample_path() -> Path:
    return DATA_PATH


@pytest.fixture
def sample_text() -> str:
    return DATA_PATH.read_text(encoding="utf-8")


@pytest.fixture
def make_line() -> Callable[..., str]:
    def _make_line(user_login: str = "alice", day: str = "2024-01-01", **overrides: object) -> str:
        payload: Dict[str, object] = {
            "report_start_day": "2024-01-01",
            "report_end_day": "2024-01-28",
            "day": day,
            "enterprise_id": "1",
            "user_id": 1,
            "user_login": user_login,
            "user_initiated_interaction_count": 0,
            "code_generation_activity_count": 0,
            "code_acceptance_activity_count": 0,
            "totals_by_ide": [],
            "totals_by_feature": [],
            "totals_by_language_feature": [],
        }
        payload.update(overrides)
        return json.dumps(payload)

    return _make_line
