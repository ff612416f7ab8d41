"""Tests for report aggregation: filtering, grouping and totals."""

from datetime import datetime, timedelta, timezone

from timetally.core.entries import UNASSIGNED, AssignedProject, TimeEntry
from timetally.rollups.aggregator import (
    ReportTotals,
    build_report,
    compute_totals,
    filter_by_range,
    filter_by_text,
    group_by_project,
)
from timetally.rollups.time_windows import resolve_range

ALPHA = AssignedProject(id="p-alpha", name="Alpha")
BRAVO = AssignedProject(id="p-bravo", name="Bravo")
CHARLIE = AssignedProject(id="p-charlie", name="Charlie")


def entry(entry_id, when, minutes, project=UNASSIGNED, task=""):
    return TimeEntry(id=entry_id, occurred_at=when, minutes=minutes, project=project, task_name=task)


def at(day, hour=9, minute=0):
    return datetime(2025, 10, day, hour, minute, tzinfo=timezone.utc)


def test_group_order_by_total_then_name():
    entries = [
        entry("1", at(6), 30, CHARLIE),
        entry("2", at(7), 60, BRAVO),
        entry("3", at(8), 60, ALPHA),
        entry("4", at(9), 120, CHARLIE),
    ]

    groups = group_by_project(entries)

    assert [g.project_name for g in groups] == ["Charlie", "Alpha", "Bravo"]
    assert [g.total_minutes for g in groups] == [150, 60, 60]


def test_tie_break_is_name_ascending():
    """Alpha and Bravo both total 60: Alpha comes first."""
    entries = [entry("b", at(6), 60, BRAVO), entry("a", at(7), 60, ALPHA)]

    assert [g.project_name for g in group_by_project(entries)] == ["Alpha", "Bravo"]


def test_name_tie_break_uses_code_point_order():
    lower = AssignedProject(id="p-lower", name="alpha")
    entries = [entry("1", at(6), 10, lower), entry("2", at(6), 10, ALPHA)]

    assert [g.project_name for g in group_by_project(entries)] == ["Alpha", "alpha"]


def test_entries_within_group_most_recent_first():
    entries = [
        entry("old", at(6), 10, ALPHA),
        entry("new", at(8), 10, ALPHA),
        entry("mid", at(7), 10, ALPHA),
    ]

    (group,) = group_by_project(entries)

    assert [e.id for e in group.entries] == ["new", "mid", "old"]
    assert group.count == 3


def test_equal_instants_keep_input_order():
    entries = [entry("first", at(6), 10, ALPHA), entry("second", at(6), 20, ALPHA)]

    (group,) = group_by_project(entries)

    assert [e.id for e in group.entries] == ["first", "second"]


def test_unassigned_entries_share_one_group():
    entries = [entry("1", at(6), 15), entry("2", at(7), 30), entry("3", at(8), 5, ALPHA)]

    groups = group_by_project(entries)

    assert [(g.project_name, g.total_minutes) for g in groups] == [("Unassigned", 45), ("Alpha", 5)]
    assert groups[0].project is UNASSIGNED


def test_project_named_unassigned_is_a_separate_group():
    """A real project called "Unassigned" never merges with entries without one."""
    named = AssignedProject(id="p-u", name="Unassigned")
    entries = [entry("1", at(6), 30), entry("2", at(7), 30, named)]

    groups = group_by_project(entries)

    assert len(groups) == 2
    assert [g.project for g in groups] == [named, UNASSIGNED]
    assert compute_totals(entries).unique_project_count == 2


def test_projects_sharing_a_name_stay_separate():
    """Grouping keys on the project id; the name is only the label."""
    alpha_two = AssignedProject(id="p-alpha-2", name="Alpha")
    entries = [entry("1", at(6), 60, ALPHA), entry("2", at(7), 30, alpha_two)]

    groups = group_by_project(entries)

    assert [(g.project, g.total_minutes) for g in groups] == [(ALPHA, 60), (alpha_two, 30)]
    assert [g.project_name for g in groups] == ["Alpha", "Alpha"]
    assert compute_totals(entries).unique_project_count == 2


def test_nameless_project_is_labelled_unassigned_but_grouped_apart():
    nameless = AssignedProject(id="p-x", name="")
    entries = [entry("1", at(6), 30), entry("2", at(7), 30, nameless)]

    groups = group_by_project(entries)

    assert [g.project for g in groups] == [nameless, UNASSIGNED]
    assert [g.project_name for g in groups] == ["Unassigned", "Unassigned"]
    assert groups[0].to_dict()["projectId"] == "p-x"
    assert compute_totals(entries).unique_project_count == 2


def test_group_to_dict():
    (group,) = group_by_project([entry("1", at(6), 90, ALPHA, "Design")])

    data = group.to_dict()

    assert data["projectId"] == "p-alpha"
    assert data["projectName"] == "Alpha"
    assert data["totalMinutes"] == 90
    assert data["hhmm"] == "01:30"
    assert data["summary"] == "1h 30m"
    assert data["count"] == 1
    assert data["entries"][0]["taskName"] == "Design"


def test_unassigned_group_to_dict_has_empty_project_id():
    (group,) = group_by_project([entry("1", at(6), 5)])

    assert group.to_dict()["projectId"] == ""


def test_filter_by_range_is_half_open():
    r = resolve_range("2025-10-08", "day", "UTC")
    entries = [
        entry("before", r.start - timedelta(milliseconds=1), 1),
        entry("start", r.start, 1),
        entry("last", r.end_exclusive - timedelta(milliseconds=1), 1),
        entry("end", r.end_exclusive, 1),
    ]

    kept = filter_by_range(entries, r.start, r.end_exclusive)

    assert [e.id for e in kept] == ["start", "last"]


def test_filter_by_text_matches_task_and_project_case_insensitively():
    entries = [
        entry("1", at(6), 10, ALPHA, "Write report"),
        entry("2", at(6), 10, BRAVO, "Review"),
        entry("3", at(6), 10, UNASSIGNED, "Standup"),
    ]

    assert [e.id for e in filter_by_text(entries, "REPORT")] == ["1"]
    assert [e.id for e in filter_by_text(entries, "bravo")] == ["2"]
    assert [e.id for e in filter_by_text(entries, "unassigned")] == ["3"]
    assert [e.id for e in filter_by_text(entries, "  review ")] == ["2"]


def test_filter_by_text_blank_query_keeps_all():
    entries = [entry("1", at(6), 10), entry("2", at(7), 10)]

    assert filter_by_text(entries, "") == entries
    assert filter_by_text(entries, "   ") == entries
    assert filter_by_text(entries, None) == entries


def test_compute_totals():
    entries = [entry("1", at(6), 30, ALPHA), entry("2", at(7), 45, ALPHA), entry("3", at(8), 15)]

    assert compute_totals(entries) == ReportTotals(total_minutes=90, entry_count=3, unique_project_count=2)


def test_compute_totals_empty():
    assert compute_totals([]) == ReportTotals(0, 0, 0)


def test_build_report_empty():
    r = resolve_range("2025-10-08", "week", "UTC")

    report = build_report([], r)

    assert report.groups == ()
    assert report.entries == ()
    assert report.totals == ReportTotals(0, 0, 0)


def test_build_report_filters_and_sums():
    r = resolve_range("2025-10-08", "week", "UTC")
    entries = [
        entry("in-1", at(6, 0, 0), 30, ALPHA, "Design, v2"),
        entry("in-2", at(12, 23, 59), 45, BRAVO, "Design review"),
        entry("in-3", at(9), 20, BRAVO, "Email"),
        entry("out", at(13, 0, 0), 999, ALPHA, "Design"),
    ]

    report = build_report(entries, r, query="design")

    assert [e.id for e in report.entries] == ["in-1", "in-2"]
    assert report.totals == ReportTotals(total_minutes=75, entry_count=2, unique_project_count=2)
    assert sum(g.total_minutes for g in report.groups) == report.totals.total_minutes
    assert sum(g.count for g in report.groups) == report.totals.entry_count


def test_build_report_is_idempotent_and_does_not_mutate_input():
    r = resolve_range("2025-10-08", "month", "UTC")
    entries = [entry(str(i), at(1 + i % 28, i % 24), i, [ALPHA, BRAVO, UNASSIGNED][i % 3]) for i in range(60)]
    snapshot = list(entries)

    first = build_report(entries, r)
    second = build_report(entries, r)

    assert first == second
    assert entries == snapshot


def test_report_totals_match_groups_for_many_entries():
    r = resolve_range("2025-10-08", "month", "UTC")
    projects = [ALPHA, BRAVO, CHARLIE, UNASSIGNED]
    entries = [entry(str(i), at(1 + i % 31, i % 24, i % 60), (i * 7) % 50, projects[i % 4]) for i in range(200)]

    report = build_report(entries, r)

    assert sum(g.total_minutes for g in report.groups) == report.totals.total_minutes
    assert sum(g.count for g in report.groups) == report.totals.entry_count == 200
    assert report.totals.unique_project_count == len(report.groups) == 4


def test_report_filename_and_to_dict():
    r = resolve_range("2025-10-08", "week", "UTC")
    report = build_report([entry("1", at(8), 30, ALPHA)], r, query="x")

    assert report.filename == "report_week_2025-10-08.csv"
    data = report.to_dict()
    assert data["range"]["from"] == "2025-10-06"
    assert data["query"] == "x"
    assert data["totals"] == {"totalMinutes": 0, "entryCount": 0, "uniqueProjectCount": 0}
    assert data["groups"] == []


def test_report_csv_uses_range_timezone():
    r = resolve_range("2025-10-08", "day", "Europe/Brussels")
    report = build_report([entry("1", datetime(2025, 10, 8, 7, 15, tzinfo=timezone.utc), 30, ALPHA, "Plan")], r)

    assert report.csv().splitlines()[1] == "10/8/2025,09:15,Alpha,Plan,30,00:30"
