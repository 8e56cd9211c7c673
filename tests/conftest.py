"""Shared fixtures for SmartStudy tests.

- ``fake_client``: in-memory stand-in for ``PocketBaseClient`` (same method names)
- ``fake_ai``: stand-in for ``GeminiService`` with canned responses
- ``controller``: an ``AppController`` wired to both, with user data loaded
- survey fixtures for the SSR classifier
"""

import itertools

import pytest

from core.exceptions import PBError
from core.models import PhoneUsageSurvey, RemediationPlan, SleepSurvey, Task
from services import ssr_classifier as ssr


# ─────────────────────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────────────────────


class FakePocketBase:
    """Keeps records in dicts; set ``fail`` to make every call raise PBError."""

    def __init__(self, username="ana"):
        self.user_id = "user-1"
        self.current_user = {"id": self.user_id, "username": username}
        self.fail = False
        self.study_data = {}
        self.notes = {}
        self.posts = {}
        self.feedback = []
        self.calls = []
        self._ids = itertools.count(1)

    def _check(self, name):
        self.calls.append(name)
        if self.fail:
            raise PBError(f"{name} failed: 500", status=500)

    def _next_id(self, prefix):
        return f"{prefix}{next(self._ids)}"

    @property
    def username(self):
        return self.current_user.get("username") or "Usuario"

    def logout(self):
        self.current_user = {}
        self.user_id = ""

    def ensure_study_data(self, username, avatar=""):
        self._check("ensure_study_data")
        for rec in self.study_data.values():
            if rec["owner"] == self.user_id:
                return rec
        rec = {
            "id": self._next_id("sd"),
            "owner": self.user_id,
            "username": username,
            "avatar": avatar,
            "settings": {"notifications": True, "sound_enabled": True},
            "data": {"tasks": [], "projects": [], "profile": None},
        }
        self.study_data[rec["id"]] = rec
        return rec

    def update_study_data(self, record_id, data):
        self._check("update_study_data")
        self.study_data[record_id]["data"] = data
        return self.study_data[record_id]

    def update_profile_fields(self, record_id, **fields):
        self._check("update_profile_fields")
        self.study_data[record_id].update(fields)
        return self.study_data[record_id]

    def list_all_study_data(self):
        self._check("list_all_study_data")
        return list(self.study_data.values())

    def list_notes(self):
        self._check("list_notes")
        return [dict(n, id=k) for k, n in self.notes.items()]

    def create_note(self, **fields):
        self._check("create_note")
        nid = self._next_id("n")
        self.notes[nid] = fields
        return dict(fields, id=nid)

    def update_note(self, note_id, **fields):
        self._check("update_note")
        self.notes[note_id] = fields
        return dict(fields, id=note_id)

    def delete_note(self, note_id):
        self._check("delete_note")
        self.notes.pop(note_id, None)

    def list_posts(self):
        self._check("list_posts")
        return [dict(p, id=k) for k, p in self.posts.items()]

    def create_post(self, **fields):
        self._check("create_post")
        pid = self._next_id("p")
        self.posts[pid] = fields
        return dict(fields, id=pid)

    def update_post(self, post_id, **fields):
        self._check("update_post")
        self.posts[post_id].update(fields)
        return dict(self.posts[post_id], id=post_id)

    def delete_post(self, post_id):
        self._check("delete_post")
        self.posts.pop(post_id, None)

    def list_feedback(self):
        self._check("list_feedback")
        return list(self.feedback)

    def create_feedback(self, **fields):
        self._check("create_feedback")
        rec = dict(fields, id=self._next_id("f"))
        self.feedback.append(rec)
        return rec


class FakeGemini:
    available = True

    def __init__(self):
        self.schedule_calls = []
        self.profile_calls = []
        self.schedule = [
            Task(id="auto-1-0", title="Estudio / consultas", date="2025-03-10",
                 start_time="09:00", duration=25, category="study"),
            Task(id="auto-1-1", title="Descanso", date="2025-03-10",
                 start_time="09:25", duration=5, category="break"),
        ]
        self.plan = RemediationPlan(topic="Derivadas", explanation="...", quiz_question="¿Qué es f'(x)?")

    def generate_smart_schedule(self, focus_list, date, available_hours):
        self.schedule_calls.append((list(focus_list), date, available_hours))
        return list(self.schedule)

    def generate_remediation_plan(self, subject, weakness):
        return self.plan

    def analyze_student_profile(self, survey):
        self.profile_calls.append(survey)
        return {"usage_level": "REASONABLE"}


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_client():
    return FakePocketBase()


@pytest.fixture
def fake_ai():
    return FakeGemini()


@pytest.fixture
def controller(fake_client, fake_ai):
    from controller.app_controller import AppController

    ctl = AppController(fake_client, fake_ai)
    ctl.load_user()
    return ctl


@pytest.fixture
def low_risk_phone():
    """Light, controlled phone use: every answer scores 0."""
    return PhoneUsageSurvey(
        daily_hours=ssr.HOURS_UNDER_2,
        peak_time="Mañana",
        purposes=[ssr.PURPOSE_STUDY],
        usage_during_study="No",
        overuse_intention="No",
        has_limits=ssr.LIMITS_OPTIONS[0],
        impact="No",
    )


@pytest.fixture
def healthy_sleep():
    return SleepSurvey(
        sleep_duration=ssr.SLEEP_7_9,
        bed_time=ssr.BED_TIME_OPTIONS[0],
        fall_asleep_time=ssr.FALL_ASLEEP_OPTIONS[0],
        sleep_quality=ssr.SLEEP_QUALITY_OPTIONS[0],
        pre_sleep_device="No",
        wake_up_state=ssr.WAKE_UP_OPTIONS[0],
        impact="No",
    )
