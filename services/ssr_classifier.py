"""
SSR (Smart Study Rhythm): clasificador de hábitos de teléfono y sueño.

Cada respuesta del cuestionario suma puntos de riesgo según tablas fijas; el
total (más un par de reglas especiales para el "grupo 5") decide en qué grupo
cae el usuario y qué consejos enlatados se le muestran. Respuestas que no están
en las tablas suman 0.
"""
from __future__ import annotations
from typing import Dict, List

from core.models import (
    ClassificationResult,
    PhoneUsageSurvey,
    RoadmapPhase,
    SleepSurvey,
    SSRAnalysis,
    StudentProfile,
    StudyMethodRecommendation,
)

# ---------- opciones del cuestionario: teléfono ----------
HOURS_UNDER_2 = "Menos de 2 horas"
HOURS_2_4 = "2–4 horas"
HOURS_4_6 = "4–6 horas"
HOURS_OVER_6 = "Más de 6 horas"
DAILY_HOURS_OPTIONS = [HOURS_UNDER_2, HOURS_2_4, HOURS_4_6, HOURS_OVER_6]

PEAK_TIME_OPTIONS = ["Mañana", "Tarde", "Noche", "Antes de dormir"]

PURPOSE_STUDY = "Estudio / consultas"
PURPOSE_CONTACT = "Comunicación (mensajes, llamadas)"
PURPOSE_SOCIAL = "Redes sociales"
PURPOSE_ENTERTAINMENT = "Entretenimiento (series, juegos)"
PURPOSE_OPTIONS = [PURPOSE_STUDY, PURPOSE_CONTACT, PURPOSE_SOCIAL, PURPOSE_ENTERTAINMENT]

FREQUENCY_OPTIONS = ["No", "A veces", "Con frecuencia"]
LIMITS_OPTIONS = ["Sí y siempre los cumplo", "Sí pero casi nunca los cumplo", "No tengo límites"]
PHONE_IMPACT_OPTIONS = ["No", "Sí, pero poco", "Sí, y se nota claramente"]

# ---------- opciones del cuestionario: sueño ----------
SLEEP_UNDER_5 = "Menos de 5 horas"
SLEEP_5_6 = "5–6 horas"
SLEEP_6_7 = "6–7 horas"
SLEEP_7_9 = "7–9 horas"
SLEEP_OVER_9 = "Más de 9 horas"
SLEEP_DURATION_OPTIONS = [SLEEP_UNDER_5, SLEEP_5_6, SLEEP_6_7, SLEEP_7_9, SLEEP_OVER_9]
BED_TIME_OPTIONS = ["Antes de las 22h", "22h–23h", "23h–0h", "Después de 0h"]
FALL_ASLEEP_OPTIONS = ["Menos de 15 minutos", "15–30 minutos", "30–60 minutos", "Más de 60 minutos"]
SLEEP_QUALITY_OPTIONS = [
    "Sueño profundo, casi no me despierto",
    "A veces me despierto",
    "Me despierto seguido, sueño liviano",
    "Me cuesta mucho dormir / insomnio frecuente",
]
PRE_SLEEP_DEVICE_OPTIONS = ["No", "Sí, menos de 30 minutos", "Sí, 30–60 minutos", "Sí, más de 60 minutos"]
WAKE_UP_OPTIONS = [
    "Despierto, con energía",
    "Normal",
    "Cansado, con sueño",
    "Muy cansado, me cuesta concentrarme",
]
SLEEP_IMPACT_OPTIONS = ["No", "Afecta un poco", "Afecta claramente"]

# ---------- tablas de puntaje ----------
_DAILY_HOURS = {HOURS_UNDER_2: 0, HOURS_2_4: 1, HOURS_4_6: 2, HOURS_OVER_6: 3}
_PEAK_TIME = dict(zip(PEAK_TIME_OPTIONS, (0, 1, 2, 3)))
_FREQUENCY = dict(zip(FREQUENCY_OPTIONS, (0, 1, 2)))
_LIMITS = dict(zip(LIMITS_OPTIONS, (0, 1, 2)))
_PHONE_IMPACT = dict(zip(PHONE_IMPACT_OPTIONS, (0, 1, 3)))
_POSITIVE_PURPOSES = {PURPOSE_STUDY: 2, PURPOSE_CONTACT: 1}
_RISK_PURPOSES = {PURPOSE_SOCIAL: 2, PURPOSE_ENTERTAINMENT: 3}

_SLEEP_DURATION = {SLEEP_7_9: 0, SLEEP_6_7: 1, SLEEP_5_6: 2, SLEEP_UNDER_5: 3, SLEEP_OVER_9: 3}
# dormir de más no cuenta como "dormir poco" para el grupo 5
_SHORT_SLEEP = {SLEEP_6_7: 1, SLEEP_5_6: 2, SLEEP_UNDER_5: 3}
_BED_TIME = dict(zip(BED_TIME_OPTIONS, (0, 1, 2, 3)))
_FALL_ASLEEP = dict(zip(FALL_ASLEEP_OPTIONS, (0, 1, 2, 3)))
_SLEEP_QUALITY = dict(zip(SLEEP_QUALITY_OPTIONS, (0, 1, 2, 3)))
_PRE_SLEEP_DEVICE = dict(zip(PRE_SLEEP_DEVICE_OPTIONS, (0, 1, 2, 3)))
_WAKE_UP = dict(zip(WAKE_UP_OPTIONS, (0, 1, 2, 3)))
_SLEEP_IMPACT = dict(zip(SLEEP_IMPACT_OPTIONS, (0, 1, 3)))

HIGH_RISK = 12
MEDIUM_RISK = 8
LOW_RISK = 5

GREEN = "#16A34A"
YELLOW = "#CA8A04"
ORANGE = "#EA580C"
RED = "#DC2626"
BLUE = "#2563EB"

PHONE_GROUPS: Dict[str, ClassificationResult] = {
    "Group 1": ClassificationResult(
        "Group 1", "Uso razonable",
        "Controlás muy bien la tecnología. ¡Felicitaciones!", GREEN,
        ("Seguí así", "Usá el tiempo libre para desarrollar habilidades blandas"),
    ),
    "Group 2": ClassificationResult(
        "Group 2", "Uso algo excesivo",
        "A veces el teléfono te atrapa, pero todavía no es grave.", YELLOW,
        ("Desactivá las notificaciones innecesarias", "Primero estudiá, después el entretenimiento"),
    ),
    "Group 3": ClassificationResult(
        "Group 3", "Uso de riesgo",
        "Estás dedicando demasiado tiempo al entretenimiento, conviene ajustar.", ORANGE,
        ("Poné límites de tiempo por aplicación", "No lleves el teléfono a la cama"),
    ),
    "Group 4": ClassificationResult(
        "Group 4", "Uso excesivo",
        "El nivel de uso es alarmante y afecta negativamente tu vida.", RED,
        ("Hacé un detox de dopamina ya", "Borrá las redes sociales del teléfono",
         "Pedile a alguien de confianza que te acompañe"),
    ),
    "Group 5": ClassificationResult(
        "Group 5", "Uso intenso con buenos fines",
        "Usás mucho el teléfono, pero sobre todo para estudiar o trabajar y mantenés el control.", BLUE,
        ("Mantené tus hábitos actuales", "Descansá la vista cada 20 minutos (regla 20-20-20)"),
    ),
}

SLEEP_GROUPS: Dict[str, ClassificationResult] = {
    "Group 1": ClassificationResult(
        "Group 1", "Sueño saludable",
        "Tenés excelentes hábitos de sueño. Tu cuerpo se recupera muy bien.", GREEN,
        ("Mantené esta rutina", "Hacé ejercicio regularmente para sostenerla"),
    ),
    "Group 2": ClassificationResult(
        "Group 2", "Bastante bien",
        "A veces dormís tarde o te levantás algo cansado, pero está bajo control.", YELLOW,
        ("Intentá acostarte 30 minutos antes", "Armá un ambiente oscuro y silencioso para dormir"),
    ),
    "Group 3": ClassificationResult(
        "Group 3", "Sueño deficiente",
        "Seguido dormís poco profundo y te sentís cansado.", ORANGE,
        ("Relajate 30 minutos antes de dormir (leer, música)",
         "No uses el teléfono la última hora antes de dormir"),
    ),
    "Group 4": ClassificationResult(
        "Group 4", "Trastorno del sueño",
        "La calidad del sueño es muy mala y afecta seriamente tu salud.", RED,
        ("Nada de cafeína después de las 14h", "Si se prolonga, consultá a un médico",
         "Fijá un horario de sueño estricto"),
    ),
    "Group 5": ClassificationResult(
        "Group 5", "Poco sueño por estudio/trabajo",
        "Dormís poco pero con buena calidad. Es un intercambio temporal.", BLUE,
        ("Aprovechá una siesta de 20-30 minutos", "Recuperá sueño el fin de semana sin exagerar",
         "No estires esta situación demasiado"),
    ),
}


def _tier(score: int, groups: Dict[str, ClassificationResult]) -> ClassificationResult:
    if score >= HIGH_RISK:
        return groups["Group 4"]
    if score >= MEDIUM_RISK:
        return groups["Group 3"]
    if score >= LOW_RISK:
        return groups["Group 2"]
    return groups["Group 1"]


def phone_scores(survey: PhoneUsageSurvey) -> Dict[str, int]:
    """Devuelve los tres ejes de puntaje: risk, control y puntos de propósito."""
    risk_purpose = sum(pts for p, pts in _RISK_PURPOSES.items() if p in survey.purposes)
    positive_purpose = sum(pts for p, pts in _POSITIVE_PURPOSES.items() if p in survey.purposes)
    control = (_FREQUENCY.get(survey.usage_during_study, 0)
               + _FREQUENCY.get(survey.overuse_intention, 0)
               + _LIMITS.get(survey.has_limits, 0))
    risk = (_DAILY_HOURS.get(survey.daily_hours, 0)
            + _PEAK_TIME.get(survey.peak_time, 0)
            + risk_purpose
            + control
            + _PHONE_IMPACT.get(survey.impact, 0))
    return {"risk": risk, "control": control, "risk_purpose": risk_purpose, "positive_purpose": positive_purpose}


def analyze_phone_usage(survey: PhoneUsageSurvey) -> ClassificationResult:
    s = phone_scores(survey)
    total_purpose = s["risk_purpose"] + s["positive_purpose"]
    high_usage = survey.daily_hours in (HOURS_4_6, HOURS_OVER_6)
    if (high_usage and total_purpose > 0
            and s["positive_purpose"] / total_purpose >= 0.6
            and s["control"] <= 4):
        return PHONE_GROUPS["Group 5"]
    return _tier(s["risk"], PHONE_GROUPS)


def sleep_score(survey: SleepSurvey) -> int:
    return (_SLEEP_DURATION.get(survey.sleep_duration, 0)
            + _BED_TIME.get(survey.bed_time, 0)
            + _FALL_ASLEEP.get(survey.fall_asleep_time, 0)
            + _SLEEP_QUALITY.get(survey.sleep_quality, 0)
            + _PRE_SLEEP_DEVICE.get(survey.pre_sleep_device, 0)
            + _WAKE_UP.get(survey.wake_up_state, 0)
            + _SLEEP_IMPACT.get(survey.impact, 0))


def analyze_sleep(survey: SleepSurvey) -> ClassificationResult:
    short = _SHORT_SLEEP.get(survey.sleep_duration, 0)
    quality = _SLEEP_QUALITY.get(survey.sleep_quality, 0)
    impact = _SLEEP_IMPACT.get(survey.impact, 0)
    if short >= 1 and quality <= 1 and impact <= 1:
        return SLEEP_GROUPS["Group 5"]
    return _tier(sleep_score(survey), SLEEP_GROUPS)


ROADMAP = (
    RoadmapPhase("Semana 1", "Poner límites", "7 días"),
    RoadmapPhase("Semana 2", "Construir hábitos nuevos", "7 días"),
    RoadmapPhase("Semana 3", "Optimizar el rendimiento", "Largo plazo"),
)


def build_analysis(phone: PhoneUsageSurvey, sleep: SleepSurvey) -> SSRAnalysis:
    phone_result = analyze_phone_usage(phone)
    sleep_result = analyze_sleep(sleep)
    method = "Dopamine Detox" if phone_result.group_name == "Group 4" else "Pomodoro"
    return SSRAnalysis(
        phone=phone_result,
        sleep=sleep_result,
        study_method=StudyMethodRecommendation(
            method_name=method,
            description="Método de concentración elegido según tu nivel de distracción.",
            reason="Recomendado a partir de los resultados de la encuesta.",
        ),
        roadmap=[RoadmapPhase(p.phase, p.focus, p.duration) for p in ROADMAP],
    )


# ---------- datos para la agenda inicial ----------
def available_study_hours(phone: PhoneUsageSurvey) -> int:
    return {HOURS_UNDER_2: 6, HOURS_2_4: 4, HOURS_4_6: 3}.get(phone.daily_hours, 2)


def focus_topics(phone: PhoneUsageSurvey) -> List[str]:
    if not phone.purposes:
        return ["Estudio autónomo general"]
    topics = [p for p in phone.purposes if p not in (PURPOSE_ENTERTAINMENT, PURPOSE_SOCIAL)]
    return topics or ["Mejorar habilidades profesionales"]


def demo_profile(name: str) -> StudentProfile:
    """Perfil enlatado para saltear el onboarding (modo prueba)."""
    phone = PhoneUsageSurvey(
        daily_hours=HOURS_2_4,
        peak_time="Noche",
        purposes=[PURPOSE_STUDY, PURPOSE_CONTACT],
        usage_during_study="A veces",
        overuse_intention="No",
        has_limits=LIMITS_OPTIONS[0],
        impact="No",
    )
    sleep = SleepSurvey(
        sleep_duration=SLEEP_7_9,
        bed_time="22h–23h",
        fall_asleep_time="15–30 minutos",
        sleep_quality=SLEEP_QUALITY_OPTIONS[0],
        pre_sleep_device="No",
        wake_up_state=WAKE_UP_OPTIONS[0],
        impact="No",
    )
    return StudentProfile(name=name, phone_survey=phone, sleep_survey=sleep, analysis=build_analysis(phone, sleep))
