from __future__ import annotations

from typing import Callable, Dict, Sequence

from ..schemas.api import ChartData, ChartDataset
from ..schemas.metrics import DailyMetrics, FeatureMetrics, IdeMetrics, LanguageMetrics
from .aggregator import MetricsAggregator
from .formatting import format_day, round_half_up


DEFAULT_LANGUAGE_LIMIT = 10


def daily_users_chart(daily: Sequence[DailyMetrics]) -> ChartData:
    return ChartData(
        labels=[format_day(item.day) for item in daily],
        datasets=[ChartDataset(label="Active Users", data=[item.active_users for item in daily])],
    )


def daily_interactions_chart(daily: Sequence[DailyMetrics]) -> ChartData:
    return ChartData(
        labels=[format_day(item.day) for item in daily],
        datasets=[
            ChartDataset(label="Interactions", data=[item.total_interactions for item in daily]),
            ChartDataset(label="Code Generated", data=[item.total_code_generated for item in daily]),
        ],
    )


def feature_chart(features: Sequence[FeatureMetrics]) -> ChartData:
    return ChartData(
        labels=[item.feature for item in features],
        datasets=[ChartDataset(label="Code Generated", data=[item.code_generated for item in features])],
    )


def ide_chart(ides: Sequence[IdeMetrics]) -> ChartData:
    # Code generated is plotted in hundreds so it shares an axis with user counts.
    return ChartData(
        labels=[item.ide for item in ides],
        datasets=[
            ChartDataset(label="Users", data=[item.users for item in ides]),
            ChartDataset(
                label="Code Generated",
                data=[round_half_up(item.code_generated, 100) for item in ides],
            ),
        ],
    )


def language_chart(
    languages: Sequence[LanguageMetrics],
    limit: int = DEFAULT_LANGUAGE_LIMIT,
) -> ChartData:
    top_languages = list(languages)[:limit]
    return ChartData(
        labels=[item.language for item in top_languages],
        datasets=[ChartDataset(label="Code Generated", data=[item.code_generated for item in top_languages])],
    )


CHART_BUILDERS: Dict[str, Callable[[MetricsAggregator], ChartData]] = {
    "daily-users": lambda aggregator: daily_users_chart(aggregator.daily_metrics()),
    "daily-interactions": lambda aggregator: daily_interactions_chart(aggregator.daily_metrics()),
    "features": lambda aggregator: feature_chart(aggregator.feature_metrics()),
    "ides": lambda aggregator: ide_chart(aggregator.ide_metrics()),
    "languages": lambda aggregator: language_chart(aggregator.language_metrics()),
}


def build_chart(name: str, aggregator: MetricsAggregator) -> ChartData:
    """Return the named chart series; raises ``KeyError`` for unknown names."""
    return CHART_BUILDERS[name](aggregator)
