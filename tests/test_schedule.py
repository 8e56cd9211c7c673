"""Tests for services/schedule.py

Covers the study-block auto-split and the dashboard/community statistics.
"""

import pytest

from core.models import Project, Task
from services import schedule


def _task(tid, start="09:00", duration=30, category="study", completed=False, actual=None, date="2025-03-10"):
    return Task(id=tid, title=tid, date=date, start_time=start, duration=duration,
                category=category, completed=completed, actual_duration=actual)


class TestTimeHelpers:
    def test_parse_and_add_minutes(self):
        assert schedule.parse_hhmm("09:30") == 570
        assert schedule.add_minutes("09:30", 45) == "10:15"

    def test_add_minutes_wraps_midnight(self):
        assert schedule.add_minutes("23:50", 20) == "00:10"

    @pytest.mark.parametrize("minutes,expected", [(45, "45m"), (60, "1h"), (65, "1h 5m"), (0, "0m")])
    def test_format_minutes(self, minutes, expected):
        assert schedule.format_minutes(minutes) == expected


class TestSplitStudyBlock:
    """Tests for the pomodoro auto-split."""

    def test_sixty_minutes_alternates_study_and_break(self):
        tasks = schedule.split_study_block("Álgebra", "2025-03-10", "09:00", 60)
        assert [(t.category, t.start_time, t.duration) for t in tasks] == [
            ("study", "09:00", 25),
            ("break", "09:25", 5),
            ("study", "09:30", 25),
            ("break", "09:55", 5),
        ]
        assert [t.title for t in tasks if t.category == "study"] == ["Álgebra (1)", "Álgebra (2)"]
        assert all(t.title == schedule.BREAK_TITLE for t in tasks if t.category == "break")

    def test_exactly_thirty_minutes(self):
        tasks = schedule.split_study_block("Física", "2025-03-10", "10:00", 30)
        assert [(t.category, t.duration) for t in tasks] == [("study", 25), ("break", 5)]

    def test_short_remainder_is_dropped(self):
        """After the last study block, a remainder under 5 minutes is discarded."""
        tasks = schedule.split_study_block("Química", "2025-03-10", "08:00", 58)
        assert [(t.category, t.duration) for t in tasks] == [
            ("study", 25), ("break", 5), ("study", 25),
        ]

    def test_partial_last_study_block(self):
        tasks = schedule.split_study_block("Historia", "2025-03-10", "08:00", 40)
        assert [(t.category, t.duration) for t in tasks] == [
            ("study", 25), ("break", 5), ("study", 10),
        ]

    def test_total_never_exceeds_requested_duration(self):
        for duration in range(30, 200, 7):
            tasks = schedule.split_study_block("X", "2025-03-10", "08:00", duration)
            assert sum(t.duration for t in tasks) <= duration

    def test_under_thirty_minutes_not_split(self):
        tasks = schedule.split_study_block("Repaso", "2025-03-10", "08:00", 25)
        assert len(tasks) == 1
        assert tasks[0].title == "Repaso"

    def test_non_study_category_not_split(self):
        tasks = schedule.split_study_block("TP final", "2025-03-10", "08:00", 90, category="project")
        assert len(tasks) == 1
        assert tasks[0].category == "project"
        assert tasks[0].duration == 90

    def test_auto_split_disabled(self):
        tasks = schedule.split_study_block("Lectura", "2025-03-10", "08:00", 90, auto_split=False)
        assert len(tasks) == 1

    def test_ids_are_unique(self):
        tasks = schedule.split_study_block("X", "2025-03-10", "08:00", 120)
        assert len({t.id for t in tasks}) == len(tasks)


class TestTasksForDay:
    def test_filters_by_date_and_sorts_by_start(self):
        tasks = [
            _task("b", start="11:00"),
            _task("other", start="08:00", date="2025-03-11"),
            _task("a", start="09:05"),
        ]
        assert [t.id for t in schedule.tasks_for_day(tasks, "2025-03-10")] == ["a", "b"]


class TestDashboardStats:
    """Tests for the personal dashboard numbers."""

    def test_empty(self):
        stats = schedule.dashboard_stats([], [])
        assert stats.total_tasks == 0
        assert stats.completion_rate == 0
        assert stats.category_hours == []

    def test_completion_and_minutes(self):
        tasks = [
            _task("a", duration=60, completed=True),
            _task("b", duration=30, completed=True, actual=45),
            _task("c", duration=30, category="review"),
        ]
        stats = schedule.dashboard_stats(tasks, [Project(id="p", name="TP", progress=40)])
        assert stats.completed_tasks == 2
        assert stats.completion_rate == 67
        assert stats.expected_minutes == 120
        # actual: completed without override counts planned, override wins, pending counts 0
        assert stats.actual_minutes == 105
        assert stats.category_minutes["study"] == 105
        assert ("review", 0.5) in stats.category_hours
        assert stats.project_progress == [("TP", 40)]

    def test_completion_rate_rounds_half_up(self):
        tasks = [_task(str(i), completed=i == 0) for i in range(8)]
        # 1/8 = 12.5% -> 13
        assert schedule.dashboard_stats(tasks, []).completion_rate == 13


class TestCommunityTrends:
    def test_no_users(self):
        trends = schedule.community_trends([])
        assert trends.total_users == 0
        assert trends.avg_tasks_per_user == 0.0

    def test_aggregates_across_users(self):
        ana = [_task("a1", duration=60, completed=True), _task("a2", category="break")]
        beto = [_task("b1", duration=30, completed=True, category="project")]
        trends = schedule.community_trends([ana, beto, []])
        assert trends.total_users == 3
        assert trends.total_tasks == 3
        assert trends.completed_tasks == 2
        assert trends.completion_rate == 67
        assert trends.avg_tasks_per_user == 1.0
        assert trends.avg_study_hours_per_user == 0.5
        assert trends.category_counts == {"study": 1, "project": 1, "break": 1, "review": 0}


class TestFindTask:
    def test_find_and_missing(self):
        tasks = [_task("a"), _task("b")]
        assert schedule.find_task(tasks, "b").id == "b"
        assert schedule.find_task(tasks, "zzz") is None
        assert schedule.find_task(tasks, None) is None
