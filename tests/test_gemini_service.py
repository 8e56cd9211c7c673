"""Tests for services/gemini_service.py

The Gemini model is replaced by a MagicMock so no network call is made; only
the prompt plumbing and the response parsing are exercised.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from core.exceptions import AIError
from core.models import PhoneUsageSurvey
from services.gemini_service import SCHEDULE_SCHEMA, GeminiService


def _service(payload):
    model = MagicMock()
    model.generate_content.return_value = MagicMock(text=json.dumps(payload))
    return GeminiService(api_key="", model_name="test-model", model=model), model


class TestModelLoading:
    def test_no_key_means_unavailable(self):
        service = GeminiService(api_key="", model_name="test-model")
        assert service.available is False
        assert service.model is None

    def test_model_is_lazy(self):
        with patch("services.gemini_service.genai") as genai:
            service = GeminiService(api_key="k", model_name="test-model")
            genai.configure.assert_not_called()
            assert service.model is genai.GenerativeModel.return_value
            genai.configure.assert_called_once_with(api_key="k")
            genai.GenerativeModel.assert_called_once_with(model_name="test-model")

    def test_generate_json_without_model_raises(self):
        service = GeminiService(api_key="", model_name="test-model")
        with pytest.raises(AIError):
            service._generate_json("hola", SCHEDULE_SCHEMA)

    def test_empty_response_raises(self):
        model = MagicMock()
        model.generate_content.return_value = MagicMock(text="")
        service = GeminiService(api_key="", model_name="m", model=model)
        with pytest.raises(AIError):
            service._generate_json("hola", SCHEDULE_SCHEMA)


class TestGenerateSmartSchedule:
    """Tests for the AI-generated schedule."""

    def test_builds_tasks_for_date(self):
        service, model = _service([
            {"title": "Álgebra", "start_time": "09:00", "duration": 25, "category": "study"},
            {"title": "Descanso", "start_time": "09:25", "duration": 5, "category": "break"},
        ])
        tasks = service.generate_smart_schedule(["Álgebra"], "2025-03-10", 3)

        assert [(t.title, t.start_time, t.duration, t.category) for t in tasks] == [
            ("Álgebra", "09:00", 25, "study"),
            ("Descanso", "09:25", 5, "break"),
        ]
        assert all(t.date == "2025-03-10" and not t.completed for t in tasks)
        assert all(t.id.startswith("auto-") for t in tasks)
        assert len({t.id for t in tasks}) == 2

        prompt = model.generate_content.call_args.args[0]
        assert "3 horas" in prompt and "Álgebra" in prompt
        config = model.generate_content.call_args.kwargs["generation_config"]
        assert config["response_mime_type"] == "application/json"
        assert config["response_schema"] is SCHEDULE_SCHEMA

    def test_unknown_category_becomes_study(self):
        service, _ = _service([{"title": "X", "start_time": "10:00", "duration": 30, "category": "party"}])
        assert service.generate_smart_schedule(["X"], "2025-03-10", 2)[0].category == "study"

    def test_malformed_items_are_skipped(self):
        service, _ = _service([
            {"title": "Sin hora", "duration": 25, "category": "study"},
            {"title": "Ok", "start_time": "11:00", "duration": "25", "category": "review"},
        ])
        tasks = service.generate_smart_schedule(["X"], "2025-03-10", 2)
        assert [t.title for t in tasks] == ["Ok"]
        assert tasks[0].duration == 25

    def test_start_times_are_validated_and_padded(self):
        service, _ = _service([
            {"title": "Tarde", "start_time": "9:00 AM", "duration": 25, "category": "study"},
            {"title": "Nueve", "start_time": "9h", "duration": 25, "category": "study"},
            {"title": "Fuera de rango", "start_time": "25:10", "duration": 25, "category": "study"},
            {"title": "Temprano", "start_time": "8:05", "duration": 25, "category": "study"},
        ])
        tasks = service.generate_smart_schedule(["X"], "2025-03-10", 2)
        assert [(t.title, t.start_time) for t in tasks] == [("Temprano", "08:05")]

    def test_non_list_response_returns_empty(self):
        service, _ = _service({"tasks": []})
        assert service.generate_smart_schedule(["X"], "2025-03-10", 2) == []

    def test_model_error_returns_empty(self):
        model = MagicMock()
        model.generate_content.side_effect = RuntimeError("quota")
        service = GeminiService(api_key="", model_name="m", model=model)
        assert service.generate_smart_schedule(["X"], "2025-03-10", 2) == []

    def test_invalid_json_returns_empty(self):
        model = MagicMock()
        model.generate_content.return_value = MagicMock(text="not json")
        service = GeminiService(api_key="", model_name="m", model=model)
        assert service.generate_smart_schedule(["X"], "2025-03-10", 2) == []


class TestRemediationPlan:
    def test_parses_plan(self):
        service, _ = _service({
            "topic": "Derivadas",
            "explanation": "La derivada mide el cambio.",
            "steps": [{"step": 1, "action": "Repasar límites", "resource": "Apunte 3"},
                      {"action": "Hacer 10 ejercicios"}],
            "quizQuestion": "¿Cuál es la derivada de x²?",
        })
        plan = service.generate_remediation_plan("Matemática", "derivadas")
        assert plan.topic == "Derivadas"
        assert [(s.step, s.action) for s in plan.steps] == [(1, "Repasar límites"), (2, "Hacer 10 ejercicios")]
        assert plan.steps[0].resource == "Apunte 3"
        assert plan.quiz_question == "¿Cuál es la derivada de x²?"

    def test_error_returns_none(self):
        service = GeminiService(api_key="", model_name="m")
        assert service.generate_remediation_plan("Matemática", "derivadas") is None


class TestAnalyzeStudentProfile:
    def test_returns_dict(self):
        service, model = _service({"usage_level": "AT_RISK", "advice_list": ["a"]})
        result = service.analyze_student_profile(PhoneUsageSurvey(daily_hours="4–6 horas"))
        assert result["usage_level"] == "AT_RISK"
        assert "4–6 horas" in model.generate_content.call_args.args[0]

    def test_non_dict_returns_none(self):
        service, _ = _service(["x"])
        assert service.analyze_student_profile(PhoneUsageSurvey()) is None
