"""Tests for controller/app_controller.py

The controller runs against the in-memory PocketBase fake and the canned
Gemini fake from conftest. Backend failures must never escape: they are
logged and the UI receives a default value.
"""

import datetime as dt

from core.models import Note, UserData
from services import ssr_classifier as ssr


class TestSession:
    def test_load_user_creates_study_data(self, controller, fake_client):
        assert controller.record_id in fake_client.study_data
        assert controller.data.tasks == []
        assert "ana" in controller.avatar

    def test_load_user_failure_gives_empty_data(self, fake_client, fake_ai):
        from controller.app_controller import AppController

        fake_client.fail = True
        ctl = AppController(fake_client, fake_ai)
        assert ctl.load_user() == UserData()
        assert ctl.record_id is None
        assert ctl.save() is False

    def test_load_user_tolerates_damaged_records(self, controller, fake_client):
        fake_client.study_data[controller.record_id]["data"] = {
            "tasks": [{"id": "t1", "title": "Leer", "date": "2025-03-10", "start_time": "9:00 AM", "duration": 20}],
            "profile": {"phone_survey": {"unknown": "x"}, "analysis": {"roadmap": None}},
        }
        data = controller.load_user()
        assert data.tasks[0].start_time == "00:00"
        assert controller.tasks_for("2025-03-10")[0].id == "t1"
        assert controller.needs_onboarding() is False

    def test_save_persists_user_data(self, controller, fake_client):
        controller.add_project("Tesis", "2025-06-01", 10)
        stored = fake_client.study_data[controller.record_id]["data"]
        assert stored["projects"][0]["name"] == "Tesis"

    def test_save_failure_returns_false(self, controller, fake_client):
        fake_client.fail = True
        assert controller.save() is False

    def test_logout_clears_state(self, controller):
        controller.add_task("Leer", "2025-03-10", "09:00", 20)
        controller.logout()
        assert controller.data.tasks == []
        assert controller.record_id is None


class TestTasks:
    """Tests for schedule task operations."""

    def test_add_study_task_is_split(self, controller, fake_client):
        created = controller.add_task("Álgebra", "2025-03-10", "09:00", 60)
        assert [t.category for t in created] == ["study", "break", "study", "break"]
        assert len(fake_client.study_data[controller.record_id]["data"]["tasks"]) == 4

    def test_add_task_without_split(self, controller):
        created = controller.add_task("Álgebra", "2025-03-10", "09:00", 60, auto_split=False)
        assert len(created) == 1

    def test_blank_title_is_ignored(self, controller, fake_client):
        assert controller.add_task("   ", "2025-03-10", "09:00", 60) == []
        assert "update_study_data" not in fake_client.calls

    def test_tasks_for_day_sorted(self, controller):
        controller.add_task("Tarde", "2025-03-10", "15:00", 20)
        controller.add_task("Mañana", "2025-03-10", "08:00", 20)
        controller.add_task("Otro día", "2025-03-11", "07:00", 20)
        assert [t.title for t in controller.tasks_for("2025-03-10")] == ["Mañana", "Tarde"]

    def test_toggle_and_update(self, controller):
        task = controller.add_task("Leer", "2025-03-10", "09:00", 20)[0]
        assert controller.toggle_task(task.id).completed is True
        assert controller.toggle_task(task.id).completed is False
        updated = controller.update_task(task.id, actual_duration=35)
        assert updated.actual_duration == 35
        assert controller.data.tasks[0].actual_duration == 35

    def test_missing_task(self, controller):
        assert controller.toggle_task("nope") is None
        assert controller.update_task("nope", title="x") is None
        assert controller.delete_task("nope") is False

    def test_delete_task(self, controller):
        task = controller.add_task("Leer", "2025-03-10", "09:00", 20)[0]
        assert controller.delete_task(task.id) is True
        assert controller.data.tasks == []


class TestProjects:
    def test_progress_is_clamped(self, controller):
        project = controller.add_project("TP", progress=140)
        assert project.progress == 100
        assert controller.update_project(project.id, progress=-5).progress == 0

    def test_blank_name_is_ignored(self, controller):
        assert controller.add_project("  ") is None

    def test_delete_project(self, controller):
        project = controller.add_project("TP")
        controller.delete_project(project.id)
        assert controller.data.projects == []


class TestNotes:
    def test_create_and_search(self, controller):
        note = controller.create_note()
        note.title = "Resumen de Historia"
        assert controller.save_note(note) is True
        controller.create_note("checklist")
        assert [n.id for n in controller.search_notes("historia")] == [note.id]
        assert len(controller.load_notes()) == 2

    def test_checklist_note_starts_with_item(self, controller):
        note = controller.create_note("checklist")
        assert len(note.items) == 1
        assert controller.toggle_checklist_item(note, 0) is True
        assert note.items[0].done is True
        assert controller.toggle_checklist_item(note, 5) is False

    def test_delete_note(self, controller, fake_client):
        note = controller.create_note()
        assert controller.delete_note(note.id) is True
        assert note.id not in fake_client.notes
        assert controller.notes == []

    def test_backend_failure(self, controller, fake_client):
        fake_client.fail = True
        assert controller.create_note() is None
        assert controller.load_notes() == []
        assert controller.save_note(Note(id="n1")) is False


class TestForum:
    def test_create_like_comment(self, controller):
        post = controller.create_post("Duda", "¿Cómo estudian?", "tips, rutina")
        assert post.tags == ["tips", "rutina"]
        assert controller.like_post(post.id).likes == ["ana"]
        assert controller.like_post(post.id).likes == []
        commented = controller.comment_post(post.id, "Con pomodoros")
        assert [c.content for c in commented.comments] == ["Con pomodoros"]

    def test_posts_round_trip_through_store(self, controller):
        post = controller.create_post("Duda", "Contenido")
        controller.comment_post(post.id, "Respuesta")
        posts = controller.load_posts()
        assert posts[0].comments[0].content == "Respuesta"

    def test_invalid_post(self, controller):
        assert controller.create_post("", "contenido") is None
        assert controller.comment_post("nope", "hola") is None

    def test_like_and_comment_roll_back_on_failure(self, controller, fake_client):
        post = controller.create_post("Duda", "Contenido")
        controller.like_post(post.id)
        fake_client.fail = True
        assert controller.like_post(post.id) is None
        assert post.likes == ["ana"]
        assert controller.comment_post(post.id, "Respuesta") is None
        assert post.comments == []

    def test_only_author_can_delete(self, controller):
        post = controller.create_post("Duda", "Contenido")
        post.author = "otro"
        assert controller.delete_post(post.id) is False
        post.author = "ana"
        assert controller.delete_post(post.id) is True
        assert controller.posts == []


class TestSurvey:
    """Tests for the SSR onboarding flow."""

    def test_needs_onboarding_until_profile(self, controller):
        assert controller.needs_onboarding() is True
        controller.skip_survey()
        assert controller.needs_onboarding() is False

    def test_complete_survey_replaces_only_todays_tasks(self, controller, fake_ai, low_risk_phone, healthy_sleep,
                                                         fake_client):
        controller.add_task("Vieja", "2025-03-09", "09:00", 20)
        controller.add_task("Hoy a mano", "2025-03-10", "18:00", 20)
        profile = controller.complete_survey(low_risk_phone, healthy_sleep, today=dt.date(2025, 3, 10))

        assert profile.analysis.phone.group_name == "Group 1"
        assert fake_ai.schedule_calls == [([ssr.PURPOSE_STUDY], "2025-03-10", 6)]
        assert [t.title for t in controller.tasks_for("2025-03-09")] == ["Vieja"]
        assert [t.id for t in controller.tasks_for("2025-03-10")] == ["auto-1-0", "auto-1-1"]
        stored = fake_client.study_data[controller.record_id]["data"]
        assert len(stored["tasks"]) == 3
        assert stored["profile"]["analysis"]["phone"]["group_name"] == "Group 1"
        assert isinstance(stored["profile"]["analysis"]["phone"]["advice"], list)

    def test_retake_without_ai_schedule_keeps_tasks(self, controller, fake_ai, low_risk_phone, healthy_sleep):
        controller.add_task("Enero", "2025-01-01", "09:00", 60)
        controller.add_task("Febrero", "2025-02-01", "09:00", 20)
        controller.complete_survey(low_risk_phone, healthy_sleep, today=dt.date(2025, 3, 10))
        before = list(controller.data.tasks)

        fake_ai.schedule = []
        profile = controller.complete_survey(low_risk_phone, healthy_sleep, today=dt.date(2025, 3, 10))

        assert controller.data.tasks == before
        assert len(before) == 7
        assert controller.data.profile is profile

    def test_profile_survives_reload(self, controller, low_risk_phone, healthy_sleep):
        controller.complete_survey(low_risk_phone, healthy_sleep, today=dt.date(2025, 3, 10))
        controller.load_user()
        analysis = controller.data.profile.analysis
        assert analysis.study_method.method_name == "Pomodoro"
        assert len(analysis.roadmap) == 3


class TestStatsAndCommunity:
    def test_dashboard(self, controller):
        task = controller.add_task("Leer", "2025-03-10", "09:00", 20)[0]
        controller.toggle_task(task.id)
        assert controller.dashboard().completion_rate == 100

    def test_community_and_directory(self, controller, fake_client):
        controller.add_task("Leer", "2025-03-10", "09:00", 20)
        fake_client.study_data["sd-x"] = {
            "id": "sd-x", "owner": "u2", "username": "beto", "avatar": "",
            "data": {"tasks": [], "projects": [], "profile": None},
        }
        trends = controller.community_trends()
        assert trends.total_users == 2
        assert trends.total_tasks == 1
        users = controller.user_directory("BE")
        assert [u["username"] for u in users] == ["beto"]
        assert users[0]["tasks"] == 0

    def test_community_failure_is_empty(self, controller, fake_client):
        fake_client.fail = True
        assert controller.community_trends().total_users == 0
        assert controller.user_directory() == []


class TestSettingsAndFeedback:
    def test_update_settings(self, controller, fake_client):
        assert controller.update_settings(False, True, avatar="http://img/a.png") is True
        rec = fake_client.study_data[controller.record_id]
        assert rec["settings"] == {"notifications": False, "sound_enabled": True}
        assert rec["avatar"] == "http://img/a.png"
        assert controller.settings.notifications is False

    def test_feedback(self, controller):
        assert controller.submit_feedback("bug", "  Se cierra  ") is True
        assert controller.submit_feedback("weird", "Otro tema") is True
        assert controller.submit_feedback("bug", "   ") is False
        feedback = controller.load_feedback()
        assert [(f.type, f.content) for f in feedback] == [("bug", "Se cierra"), ("other", "Otro tema")]


class TestRemediationAndPomodoro:
    def test_remediation_requires_input(self, controller, fake_ai):
        assert controller.remediation_plan("", "algo") is None
        assert controller.remediation_plan("Matemática", "derivadas") is fake_ai.plan

    def test_sync_pomodoro_uses_schedule(self, controller):
        controller.add_task("Leer", "2025-03-10", "09:00", 20)
        task = controller.sync_pomodoro(dt.datetime(2025, 3, 10, 9, 5))
        assert task.title == "Leer"
        assert controller.pomodoro.state.selected_task_id == task.id

    def test_ai_usage_report_needs_profile(self, controller, fake_ai):
        assert controller.ai_usage_report() is None
        controller.skip_survey()
        assert controller.ai_usage_report() == {"usage_level": "REASONABLE"}
        assert fake_ai.profile_calls[0].daily_hours == ssr.HOURS_2_4
