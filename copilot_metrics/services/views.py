"""Reductions that fold a flat record stream into the dashboard views.

Each builder makes one pass over the records (and their breakdown entries),
keeps an insertion-ordered accumulator per grouping key, then projects the
accumulators into view models sorted by a fixed key. Python's sort is stable,
so ties keep first-seen order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

from ..schemas.metrics import (
    DailyMetrics,
    FeatureMetrics,
    GlobalStats,
    IdeMetrics,
    LanguageMetrics,
    UsageRecord,
    UserSummary,
)
from .formatting import acceptance_rate, format_feature_name, format_ide_name, format_language_name


UNKNOWN_IDE = "unknown"


@dataclass
class ActivityTotals:
    interactions: int = 0
    generated: int = 0
    accepted: int = 0
    users: Set[str] = field(default_factory=set)


@dataclass
class UserTotals:
    user_id: int
    primary_ide: str
    last_active_day: str
    interactions: int = 0
    generated: int = 0
    accepted: int = 0
    active_days: int = 0
    loc_added: int = 0
    loc_suggested: int = 0


def _loc_totals(record: UsageRecord) -> Tuple[int, int]:
    added = sum(entry.loc_added_sum for entry in record.totals_by_ide)
    suggested = sum(entry.loc_suggested_to_add_sum for entry in record.totals_by_ide)
    return added, suggested


def build_users_summary(records: Sequence[UsageRecord]) -> List[UserSummary]:
    totals: Dict[str, UserTotals] = {}
    for record in records:
        entry = totals.get(record.user_login)
        if entry is None:
            # Primary editor is fixed by the first record seen for the user.
            first_ide = record.totals_by_ide[0].ide if record.totals_by_ide else None
            entry = UserTotals(
                user_id=record.user_id,
                primary_ide=format_ide_name(first_ide) if first_ide else UNKNOWN_IDE,
                last_active_day=record.day,
            )
            totals[record.user_login] = entry
        elif record.day > entry.last_active_day:
            entry.last_active_day = record.day

        entry.interactions += record.user_initiated_interaction_count
        entry.generated += record.code_generation_activity_count
        entry.accepted += record.code_acceptance_activity_count
        # Counts records, not distinct days.
        entry.active_days += 1
        added, suggested = _loc_totals(record)
        entry.loc_added += added
        entry.loc_suggested += suggested

    summaries = [
        UserSummary(
            user_login=login,
            user_id=entry.user_id,
            total_interactions=entry.interactions,
            total_code_generated=entry.generated,
            total_code_accepted=entry.accepted,
            acceptance_rate=acceptance_rate(entry.accepted, entry.generated),
            active_days=entry.active_days,
            last_active_day=entry.last_active_day,
            primary_ide=entry.primary_ide,
            loc_added=entry.loc_added,
            loc_suggested=entry.loc_suggested,
        )
        for login, entry in totals.items()
    ]
    return sorted(summaries, key=lambda summary: summary.total_interactions, reverse=True)


def build_daily_metrics(records: Sequence[UsageRecord]) -> List[DailyMetrics]:
    totals: Dict[str, ActivityTotals] = {}
    for record in records:
        entry = totals.setdefault(record.day, ActivityTotals())
        entry.users.add(record.user_login)
        entry.interactions += record.user_initiated_interaction_count
        entry.generated += record.code_generation_activity_count
        entry.accepted += record.code_acceptance_activity_count

    daily = [
        DailyMetrics(
            day=day,
            active_users=len(entry.users),
            total_interactions=entry.interactions,
            total_code_generated=entry.generated,
            total_code_accepted=entry.accepted,
            acceptance_rate=acceptance_rate(entry.accepted, entry.generated),
        )
        for day, entry in totals.items()
    ]
    return sorted(daily, key=lambda item: item.day)


def build_feature_metrics(records: Sequence[UsageRecord]) -> List[FeatureMetrics]:
    totals: Dict[str, ActivityTotals] = {}
    for record in records:
        for breakdown in record.totals_by_feature:
            entry = totals.setdefault(breakdown.feature, ActivityTotals())
            entry.interactions += breakdown.user_initiated_interaction_count
            entry.generated += breakdown.code_generation_activity_count
            entry.accepted += breakdown.code_acceptance_activity_count

    features = [
        FeatureMetrics(
            feature=format_feature_name(feature),
            interactions=entry.interactions,
            code_generated=entry.generated,
            code_accepted=entry.accepted,
            acceptance_rate=acceptance_rate(entry.accepted, entry.generated),
        )
        for feature, entry in totals.items()
    ]
    return sorted(features, key=lambda item: item.code_generated, reverse=True)


def build_ide_metrics(records: Sequence[UsageRecord]) -> List[IdeMetrics]:
    totals: Dict[str, ActivityTotals] = {}
    for record in records:
        for breakdown in record.totals_by_ide:
            entry = totals.setdefault(breakdown.ide, ActivityTotals())
            entry.users.add(record.user_login)
            entry.interactions += breakdown.user_initiated_interaction_count
            entry.generated += breakdown.code_generation_activity_count
            entry.accepted += breakdown.code_acceptance_activity_count

    ides = [
        IdeMetrics(
            ide=format_ide_name(ide),
            users=len(entry.users),
            interactions=entry.interactions,
            code_generated=entry.generated,
            code_accepted=entry.accepted,
        )
        for ide, entry in totals.items()
    ]
    return sorted(ides, key=lambda item: item.users, reverse=True)


def build_language_metrics(records: Sequence[UsageRecord]) -> List[LanguageMetrics]:
    totals: Dict[str, ActivityTotals] = {}
    for record in records:
        for breakdown in record.totals_by_language_feature:
            entry = totals.setdefault(breakdown.language, ActivityTotals())
            entry.generated += breakdown.code_generation_activity_count
            entry.accepted += breakdown.code_acceptance_activity_count

    languages = [
        LanguageMetrics(
            language=format_language_name(language),
            code_generated=entry.generated,
            code_accepted=entry.accepted,
            acceptance_rate=acceptance_rate(entry.accepted, entry.generated),
        )
        for language, entry in totals.items()
    ]
    return sorted(languages, key=lambda item: item.code_generated, reverse=True)


def build_global_stats(records: Sequence[UsageRecord]) -> GlobalStats:
    if not records:
        return GlobalStats()

    users: Set[str] = set()
    interactions = generated = accepted = loc_added = loc_suggested = 0
    for record in records:
        users.add(record.user_login)
        interactions += record.user_initiated_interaction_count
        generated += record.code_generation_activity_count
        accepted += record.code_acceptance_activity_count
        added, suggested = _loc_totals(record)
        loc_added += added
        loc_suggested += suggested

    first = records[0]
    return GlobalStats(
        total_users=len(users),
        total_interactions=interactions,
        total_code_generated=generated,
        total_code_accepted=accepted,
        average_acceptance_rate=acceptance_rate(accepted, generated),
        report_start_day=first.report_start_day,
        report_end_day=first.report_end_day,
        total_loc_added=loc_added,
        total_loc_suggested=loc_suggested,
    )


def filter_user_records(records: Sequence[UsageRecord], user_login: str) -> List[UsageRecord]:
    return [record for record in records if record.user_login == user_login]
