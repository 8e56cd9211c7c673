"""
Cliente Gemini para la agenda "inteligente", el tutor de refuerzo y el análisis SSR.

Todas las llamadas piden salida JSON con un ``response_schema``; cualquier error
(red, clave inválida, JSON roto) se loguea y se devuelve el valor por defecto
(lista vacía o ``None``) para que la UI siga funcionando.
"""
from __future__ import annotations
import json
import time
from dataclasses import asdict
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from loguru import logger

from core.exceptions import AIError
from core.models import CATEGORIES, PhoneUsageSurvey, RemediationPlan, Task, normalize_hhmm

SCHEDULE_PROMPT = """
Soy estudiante y necesito una agenda para el {date}.
Tengo {hours} horas disponibles para estudiar.
Mis temas o materias principales son: {focus}.

IMPORTANTE: armá una agenda estilo "Pomodoro".
1. Dividí el tiempo en bloques de 25 minutos de "study" y 5 minutos de "break".
2. Cada 4 pomodoros (unas 2 horas) agregá un descanso largo de 15 a 20 minutos.
3. Asigná materias concretas de mi lista a cada bloque de estudio.
4. Usá horas en formato HH:MM (24 h) y devolvé un array JSON de tareas.
"""

REMEDIATION_PROMPT = """
Soy estudiante y tengo dificultades con la materia: {subject}.
Problema concreto: {weakness}.
Actuá como un buen tutor: explicá brevemente el concepto en español.
Después proponé un plan de 3 a 5 pasos para superar esta debilidad.
Por último, escribí 1 pregunta de opción múltiple para comprobarlo.
"""

PROFILE_PROMPT = """
Sos SSR (Smart Study Rhythm). Analizá estos datos de uso del teléfono de un estudiante:
{survey}

Reglas de clasificación:
1. daily_hours "Menos de 2 horas" o "2–4 horas" -> REASONABLE.
2. daily_hours "4–6 horas" -> AT_RISK.
3. daily_hours "Más de 6 horas" -> EXCESSIVE.

Con ese nivel, generá un informe JSON con un resumen, consejos concretos,
un método de estudio recomendado y una hoja de ruta de 3 etapas.
"""

SCHEDULE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING"},
            "start_time": {"type": "STRING", "description": "Formato HH:MM (24 h)"},
            "duration": {"type": "NUMBER", "description": "Duración en minutos"},
            "category": {"type": "STRING", "enum": list(CATEGORIES)},
        },
        "required": ["title", "start_time", "duration", "category"],
    },
}

REMEDIATION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "topic": {"type": "STRING"},
        "explanation": {"type": "STRING"},
        "steps": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "step": {"type": "INTEGER"},
                    "action": {"type": "STRING"},
                    "resource": {"type": "STRING"},
                },
            },
        },
        "quiz_question": {"type": "STRING"},
    },
}

PROFILE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "usage_level": {"type": "STRING", "enum": ["REASONABLE", "AT_RISK", "EXCESSIVE"]},
        "usage_level_label": {"type": "STRING"},
        "usage_summary": {"type": "STRING"},
        "advice_list": {"type": "ARRAY", "items": {"type": "STRING"}},
        "study_method": {
            "type": "OBJECT",
            "properties": {
                "method_name": {"type": "STRING"},
                "description": {"type": "STRING"},
                "reason": {"type": "STRING"},
            },
        },
        "roadmap": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "phase": {"type": "STRING"},
                    "focus": {"type": "STRING"},
                    "duration": {"type": "STRING"},
                },
            },
        },
    },
}


class GeminiService:
    def __init__(self, api_key: str, model_name: str, model: Any = None):
        self.api_key = api_key
        self.model_name = model_name
        self._model = model

    @property
    def model(self):
        """Lazy-load del modelo; None si no hay API key."""
        if self._model is None and self.api_key:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(model_name=self.model_name)
            logger.info(f"Gemini model initialized: {self.model_name}")
        return self._model

    @property
    def available(self) -> bool:
        return bool(self._model is not None or self.api_key)

    def _generate_json(self, prompt: str, schema: Dict[str, Any]) -> Any:
        model = self.model
        if model is None:
            raise AIError("No Gemini API key configured")
        response = model.generate_content(
            prompt,
            generation_config={
                "temperature": 0.4,
                "response_mime_type": "application/json",
                "response_schema": schema,
            },
        )
        text = (response.text or "").strip()
        if not text:
            raise AIError("Empty response from Gemini")
        return json.loads(text)

    # ---------- agenda ----------
    def generate_smart_schedule(self, focus_list: List[str], date: str, available_hours: int) -> List[Task]:
        prompt = SCHEDULE_PROMPT.format(date=date, hours=available_hours, focus=", ".join(focus_list))
        try:
            raw = self._generate_json(prompt, SCHEDULE_SCHEMA)
        except Exception as e:
            logger.error(f"Error generating schedule: {e}")
            return []
        if not isinstance(raw, list):
            logger.warning("Gemini schedule response is not a list")
            return []

        stamp = int(time.time() * 1000)
        tasks = []
        for i, item in enumerate(raw):
            try:
                tasks.append(Task(
                    id=f"auto-{stamp}-{i}",
                    title=str(item["title"]),
                    date=date,
                    start_time=normalize_hhmm(item["start_time"]),
                    duration=int(item["duration"]),
                    category=item.get("category") if item.get("category") in CATEGORIES else "study",
                ))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed schedule item {item!r}: {e}")
        return tasks

    # ---------- tutor ----------
    def generate_remediation_plan(self, subject: str, weakness: str) -> Optional[RemediationPlan]:
        prompt = REMEDIATION_PROMPT.format(subject=subject, weakness=weakness)
        try:
            raw = self._generate_json(prompt, REMEDIATION_SCHEMA)
            return RemediationPlan.from_record(raw)
        except Exception as e:
            logger.error(f"Error creating remediation plan: {e}")
            return None

    # ---------- SSR ----------
    def analyze_student_profile(self, survey: PhoneUsageSurvey) -> Optional[Dict[str, Any]]:
        prompt = PROFILE_PROMPT.format(survey=json.dumps(asdict(survey), ensure_ascii=False))
        try:
            raw = self._generate_json(prompt, PROFILE_SCHEMA)
        except Exception as e:
            logger.error(f"Error analyzing profile: {e}")
            return None
        return raw if isinstance(raw, dict) else None
