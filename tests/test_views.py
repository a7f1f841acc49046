import json

import pytest
from pydantic import ValidationError

from copilot_metrics.services.parser import parse_records
from copilot_metrics.services.views import (
    build_daily_metrics,
    build_feature_metrics,
    build_global_stats,
    build_ide_metrics,
    build_language_metrics,
    build_users_summary,
    filter_user_records,
)


@pytest.fixture
def records(sample_text):
    return parse_records(sample_text)


def test_users_summary_totals(records):
    summaries = {summary.user_login: summary for summary in build_users_summary(records)}
    alice = summaries["alice"]
    assert alice.total_interactions == 16
    assert alice.total_code_generated == 8
    assert alice.total_code_accepted == 5
    assert alice.acceptance_rate == 63
    assert alice.active_days == 2
    assert alice.last_active_day == "2024-01-02"
    assert alice.loc_added == 4
    assert alice.loc_suggested == 8

    bob = summaries["bob"]
    assert bob.acceptance_rate == 50
    assert bob.last_active_day == "2024-01-03"
    assert bob.loc_added == 17
    assert summaries["carol"].acceptance_rate == 0


def test_users_summary_sorted_by_interactions_with_stable_ties(records):
    logins = [summary.user_login for summary in build_users_summary(records)]
    # alice and bob tie on 16 interactions; alice was seen first.
    assert logins == ["alice", "bob", "carol"]


def test_users_summary_interactions_add_up(records):
    summaries = build_users_summary(records)
    assert sum(s.total_interactions for s in summaries) == sum(
        r.user_initiated_interaction_count for r in records
    )


def test_primary_ide_is_fixed_by_first_record(records):
    summaries = {summary.user_login: summary for summary in build_users_summary(records)}
    # alice switched to neovim on her second day.
    assert summaries["alice"].primary_ide == "VS Code"
    assert summaries["bob"].primary_ide == "IntelliJ IDEA"


def test_primary_ide_unknown_without_editor_breakdown(make_line):
    (summary,) = build_users_summary(parse_records(make_line("dave")))
    assert summary.primary_ide == "unknown"


def test_single_record_scenario(make_line):
    line = make_line(
        user_initiated_interaction_count=10,
        code_generation_activity_count=5,
        code_acceptance_activity_count=2,
        totals_by_ide=[{"ide": "vscode", "loc_added_sum": 3, "loc_suggested_to_add_sum": 6}],
    )
    (summary,) = build_users_summary(parse_records(line))
    assert summary.total_interactions == 10
    assert summary.acceptance_rate == 40
    assert summary.primary_ide == "VS Code"
    assert summary.loc_added == 3
    assert summary.loc_suggested == 6


def test_active_days_counts_records_not_distinct_days(make_line):
    text = "\n".join([make_line("alice", "2024-01-01"), make_line("alice", "2024-01-01")])
    (summary,) = build_users_summary(parse_records(text))
    assert summary.active_days == 2


def test_last_active_day_is_max_not_last_seen(make_line):
    text = "\n".join([make_line("alice", "2024-01-05"), make_line("alice", "2024-01-02")])
    (summary,) = build_users_summary(parse_records(text))
    assert summary.last_active_day == "2024-01-05"


def test_daily_metrics(records):
    daily = build_daily_metrics(records)
    assert [item.day for item in daily] == ["2024-01-01", "2024-01-02", "2024-01-03"]
    first = daily[0]
    assert first.active_users == 2
    assert first.total_interactions == 14
    assert first.total_code_generated == 13
    assert first.total_code_accepted == 6
    assert first.acceptance_rate == 46
    assert daily[1].acceptance_rate == 100


def test_daily_metrics_sorted_and_distinct_users(make_line):
    text = "\n".join(
        [
            make_line("alice", "2024-02-03"),
            make_line("alice", "2024-02-01"),
            make_line("alice", "2024-02-01"),
            make_line("bob", "2024-02-02"),
        ]
    )
    daily = build_daily_metrics(parse_records(text))
    days = [item.day for item in daily]
    assert days == sorted(days)
    assert daily[0].active_users == 1


def test_feature_metrics(records):
    features = build_feature_metrics(records)
    assert [item.feature for item in features] == [
        "Code Completion",
        "Chat - Agent Mode",
        "Inline Chat",
        "Chat - Ask Mode",
    ]
    completion = features[0]
    assert completion.code_generated == 13
    assert completion.code_accepted == 6
    assert completion.acceptance_rate == 46
    assert features[-1].interactions == 10
    assert features[-1].acceptance_rate == 0
    generated = [item.code_generated for item in features]
    assert generated == sorted(generated, reverse=True)


def test_ide_metrics(records):
    ides = build_ide_metrics(records)
    assert [(item.ide, item.users) for item in ides] == [
        ("VS Code", 2),
        ("IntelliJ IDEA", 1),
        ("Neovim", 1),
    ]
    intellij = ides[1]
    assert intellij.interactions == 16
    assert intellij.code_generated == 18
    assert intellij.code_accepted == 9


def test_language_metrics(records):
    languages = build_language_metrics(records)
    assert [(item.language, item.code_generated, item.acceptance_rate) for item in languages] == [
        ("Java", 14, 50),
        ("Python", 9, 44),
        ("Typescript", 3, 100),
    ]


def test_global_stats(records):
    stats = build_global_stats(records)
    assert stats.total_users == 3
    assert stats.total_interactions == 32
    assert stats.total_code_generated == 26
    assert stats.total_code_accepted == 14
    assert stats.average_acceptance_rate == 54
    assert stats.report_start_day == "2024-01-01"
    assert stats.report_end_day == "2024-01-28"
    assert stats.total_loc_added == 21
    assert stats.total_loc_suggested == 42


def test_views_of_empty_collection():
    assert build_users_summary([]) == []
    assert build_daily_metrics([]) == []
    stats = build_global_stats([])
    assert stats.total_users == 0
    assert stats.report_start_day == ""


def test_filter_user_records_keeps_order(records):
    days = [record.day for record in filter_user_records(records, "bob")]
    assert days == ["2024-01-01", "2024-01-03"]
    assert filter_user_records(records, "nobody") == []


def test_views_are_read_only(records):
    summary = build_users_summary(records)[0]
    with pytest.raises(ValidationError):
        summary.total_interactions = 0


def test_unknown_feature_falls_back_to_title_case(make_line):
    line = make_line(
        totals_by_feature=[{"feature": "agent_code_review", "code_generation_activity_count": 1}]
    )
    (feature,) = build_feature_metrics(parse_records(line))
    assert feature.feature == "Agent Code Review"
    assert json.loads(feature.model_dump_json())["code_generated"] == 1
