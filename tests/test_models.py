"""Tests for core/models.py record conversion."""

import pytest

from core.models import Feedback, ForumPost, Note, Project, RemediationPlan, Task, UserData, normalize_hhmm
from services.ssr_classifier import demo_profile


class TestTaskRecord:
    def test_accepts_camel_case_keys(self):
        task = Task.from_record({"id": 7, "title": "Leer", "date": "2025-03-10",
                                 "startTime": "08:30", "duration": "45", "actualDuration": 50})
        assert task.id == "7"
        assert task.start_time == "08:30"
        assert task.duration == 45
        assert task.actual_duration == 50

    def test_unknown_category_defaults_to_study(self):
        assert Task.from_record({"category": "fiesta"}).category == "study"

    def test_start_time_is_normalised(self):
        assert Task.from_record({"start_time": "7:30"}).start_time == "07:30"
        assert Task.from_record({"start_time": "9:00 AM"}).start_time == "00:00"
        assert Task.from_record({}).start_time == "00:00"

    def test_normalize_hhmm_rejects_garbage(self):
        assert normalize_hhmm(" 9:05 ") == "09:05"
        for bad in ("9h", "24:00", "", None):
            with pytest.raises(ValueError):
                normalize_hhmm(bad)


class TestProject:
    def test_progress_clamped(self):
        assert Project(id="p", name="TP", progress=150).progress == 100
        assert Project.from_record({"progress": -3}).progress == 0


class TestNote:
    def test_to_record_omits_id(self):
        rec = Note(id="n1", title="t").to_record()
        assert "id" not in rec
        assert rec["title"] == "t"

    def test_from_record_uses_backend_timestamps(self):
        note = Note.from_record({"id": "n1", "type": "weird", "created": "2025-01-01", "updated": "2025-01-02",
                                 "items": [{"text": "a", "done": True}]})
        assert note.type == "text"
        assert note.created_at == "2025-01-01"
        assert note.updated_at == "2025-01-02"
        assert note.items[0].done is True


class TestFeedback:
    def test_unknown_type_is_other(self):
        assert Feedback.from_record({"type": "rant"}).type == "other"


class TestRemediationPlan:
    def test_steps_numbered_when_missing(self):
        plan = RemediationPlan.from_record({"steps": [{"action": "a"}, {"action": "b"}]})
        assert [s.step for s in plan.steps] == [1, 2]


class TestUserData:
    def test_empty_record(self):
        assert UserData.from_record(None) == UserData()

    def test_profile_round_trip(self):
        data = UserData(profile=demo_profile("ana"))
        restored = UserData.from_record(data.to_record())
        assert restored.profile.analysis.phone == data.profile.analysis.phone
        assert restored.profile.phone_survey == data.profile.phone_survey

    def test_damaged_profile_does_not_raise(self):
        data = UserData.from_record({"profile": {
            "name": "ana",
            "phone_survey": {"daily_hours": "2–4 horas", "legacy_field": 1},
            "sleep_survey": None,
            "analysis": {"sleep": {"title": "Ok", "extra": True}, "roadmap": [{"phase": "1"}, "x"]},
        }})
        profile = data.profile
        assert profile.phone_survey.daily_hours == "2–4 horas"
        assert profile.sleep_survey.sleep_duration == ""
        assert profile.analysis.phone.group_name == ""
        assert profile.analysis.sleep.title == "Ok"
        assert profile.analysis.study_method.method_name == ""
        assert [p.phase for p in profile.analysis.roadmap] == ["1"]

    def test_non_dict_profile_is_dropped(self):
        assert UserData.from_record({"profile": "corrupto"}).profile is None


class TestForumPost:
    def test_comments_tolerate_missing_keys(self):
        post = ForumPost.from_record({"id": "p1", "comments": [{"content": "hola", "likes": 3}, None]})
        assert [(c.author, c.content) for c in post.comments] == [("", "hola")]
