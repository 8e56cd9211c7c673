from __future__ import annotations
import datetime as dt
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, List, Optional

CATEGORIES = ("study", "project", "break", "review")
NOTE_TYPES = ("text", "checklist")
FEEDBACK_TYPES = ("feature", "bug", "other")


def normalize_hhmm(value: Any) -> str:
    """Valida una hora 'H:MM' o 'HH:MM' y la devuelve como 'HH:MM'. ValueError si no es válida."""
    t = dt.datetime.strptime(str(value).strip(), "%H:%M")
    return f"{t.hour:02d}:{t.minute:02d}"


def _known_fields(cls, r: Any) -> Dict[str, Any]:
    """Filtra un dict a los campos del dataclass (descarta claves desconocidas)."""
    if not isinstance(r, dict):
        return {}
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in r.items() if k in names}


def _safe_hhmm(value: Any) -> str:
    try:
        return normalize_hhmm(value)
    except ValueError:
        return "00:00"

@dataclass
class Task:
    id: str
    title: str
    date: str        # YYYY-MM-DD
    start_time: str  # HH:MM
    duration: int    # minutes
    category: str = "study"  # study | project | break | review
    completed: bool = False
    description: str = ""
    actual_duration: Optional[int] = None

    @classmethod
    def from_record(cls, r: Dict[str, Any]) -> "Task":
        return cls(
            id=str(r.get("id", "")),
            title=r.get("title") or "",
            date=r.get("date") or "",
            start_time=_safe_hhmm(r.get("start_time") or r.get("startTime")),
            duration=int(r.get("duration") or 0),
            category=r.get("category") if r.get("category") in CATEGORIES else "study",
            completed=bool(r.get("completed")),
            description=r.get("description") or "",
            actual_duration=r.get("actual_duration") or r.get("actualDuration"),
        )

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Project:
    id: str
    name: str
    deadline: str = ""
    progress: int = 0  # 0..100
    description: str = ""

    def __post_init__(self):
        self.progress = max(0, min(100, int(self.progress or 0)))

    @classmethod
    def from_record(cls, r: Dict[str, Any]) -> "Project":
        return cls(
            id=str(r.get("id", "")),
            name=r.get("name") or "",
            deadline=r.get("deadline") or "",
            progress=r.get("progress") or 0,
            description=r.get("description") or "",
        )

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ChecklistItem:
    text: str
    done: bool = False


@dataclass
class Note:
    id: str
    title: str = ""
    content: str = ""
    type: str = "text"  # text | checklist
    items: List[ChecklistItem] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    color: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_record(cls, r: Dict[str, Any]) -> "Note":
        return cls(
            id=str(r.get("id", "")),
            title=r.get("title") or "",
            content=r.get("content") or "",
            type=r.get("type") if r.get("type") in NOTE_TYPES else "text",
            items=[ChecklistItem(i.get("text", ""), bool(i.get("done"))) for i in (r.get("items") or [])],
            tags=list(r.get("tags") or []),
            color=r.get("color"),
            created_at=r.get("created_at") or r.get("created") or "",
            updated_at=r.get("updated_at") or r.get("updated") or "",
        )

    def to_record(self) -> Dict[str, Any]:
        rec = asdict(self)
        rec.pop("id")
        return rec


@dataclass
class ForumComment:
    id: str
    author: str
    content: str
    created_at: str
    author_avatar: Optional[str] = None


@dataclass
class ForumPost:
    id: str
    author: str
    title: str
    content: str
    likes: List[str] = field(default_factory=list)  # usernames
    comments: List[ForumComment] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    created_at: str = ""
    author_avatar: Optional[str] = None

    @classmethod
    def from_record(cls, r: Dict[str, Any]) -> "ForumPost":
        return cls(
            id=str(r.get("id", "")),
            author=r.get("author") or "",
            title=r.get("title") or "",
            content=r.get("content") or "",
            likes=list(r.get("likes") or []),
            comments=[ForumComment(str(c.get("id", "")), c.get("author") or "", c.get("content") or "",
                                   c.get("created_at") or "", c.get("author_avatar"))
                      for c in (r.get("comments") or []) if isinstance(c, dict)],
            tags=list(r.get("tags") or []),
            created_at=r.get("created_at") or r.get("created") or "",
            author_avatar=r.get("author_avatar"),
        )

    def to_record(self) -> Dict[str, Any]:
        rec = asdict(self)
        rec.pop("id")
        return rec


@dataclass
class Feedback:
    id: str
    author: str
    type: str  # feature | bug | other
    content: str
    created_at: str = ""

    @classmethod
    def from_record(cls, r: Dict[str, Any]) -> "Feedback":
        return cls(
            id=str(r.get("id", "")),
            author=r.get("author") or "",
            type=r.get("type") if r.get("type") in FEEDBACK_TYPES else "other",
            content=r.get("content") or "",
            created_at=r.get("created_at") or r.get("created") or "",
        )


# ---------- SSR survey ----------
@dataclass
class PhoneUsageSurvey:
    daily_hours: str = ""
    peak_time: str = ""
    purposes: List[str] = field(default_factory=list)
    usage_during_study: str = ""
    overuse_intention: str = ""
    has_limits: str = ""
    impact: str = ""

    def is_complete(self) -> bool:
        return all([self.daily_hours, self.peak_time, self.purposes, self.usage_during_study,
                    self.overuse_intention, self.has_limits, self.impact])


@dataclass
class SleepSurvey:
    sleep_duration: str = ""
    bed_time: str = ""
    fall_asleep_time: str = ""
    sleep_quality: str = ""
    pre_sleep_device: str = ""
    wake_up_state: str = ""
    impact: str = ""

    def is_complete(self) -> bool:
        return all([self.sleep_duration, self.bed_time, self.fall_asleep_time, self.sleep_quality,
                    self.pre_sleep_device, self.wake_up_state, self.impact])


@dataclass(frozen=True)
class ClassificationResult:
    group_name: str  # "Group 1".."Group 5"
    title: str
    description: str
    color: str
    advice: tuple = ()


@dataclass
class StudyMethodRecommendation:
    method_name: str
    description: str
    reason: str


@dataclass
class RoadmapPhase:
    phase: str
    focus: str
    duration: str
    details: Optional[str] = None


@dataclass
class SSRAnalysis:
    phone: ClassificationResult
    sleep: ClassificationResult
    study_method: StudyMethodRecommendation
    roadmap: List[RoadmapPhase] = field(default_factory=list)

    @classmethod
    def from_record(cls, r: Dict[str, Any]) -> "SSRAnalysis":
        def group(g):
            g = _known_fields(ClassificationResult, g)
            return ClassificationResult(
                group_name=g.get("group_name") or "",
                title=g.get("title") or "",
                description=g.get("description") or "",
                color=g.get("color") or "",
                advice=tuple(g.get("advice") or ()),
            )
        method = _known_fields(StudyMethodRecommendation, r.get("study_method"))
        return cls(
            phone=group(r.get("phone")),
            sleep=group(r.get("sleep")),
            study_method=StudyMethodRecommendation(
                method_name=method.get("method_name") or "",
                description=method.get("description") or "",
                reason=method.get("reason") or "",
            ),
            roadmap=[RoadmapPhase(p.get("phase") or "", p.get("focus") or "", p.get("duration") or "",
                                  p.get("details"))
                     for p in r.get("roadmap") or [] if isinstance(p, dict)],
        )


@dataclass
class StudentProfile:
    name: str
    phone_survey: PhoneUsageSurvey
    sleep_survey: SleepSurvey
    analysis: Optional[SSRAnalysis] = None

    @classmethod
    def from_record(cls, r: Dict[str, Any]) -> "StudentProfile":
        analysis = r.get("analysis")
        return cls(
            name=r.get("name") or "",
            phone_survey=PhoneUsageSurvey(**_known_fields(PhoneUsageSurvey, r.get("phone_survey"))),
            sleep_survey=SleepSurvey(**_known_fields(SleepSurvey, r.get("sleep_survey"))),
            analysis=SSRAnalysis.from_record(analysis) if isinstance(analysis, dict) else None,
        )

    def to_record(self) -> Dict[str, Any]:
        rec = asdict(self)
        if rec["analysis"]:
            for key in ("phone", "sleep"):
                rec["analysis"][key]["advice"] = list(rec["analysis"][key]["advice"])
        return rec


# ---------- remediation ----------
@dataclass
class RemediationStep:
    step: int
    action: str
    resource: Optional[str] = None


@dataclass
class RemediationPlan:
    topic: str
    explanation: str
    steps: List[RemediationStep] = field(default_factory=list)
    quiz_question: str = ""

    @classmethod
    def from_record(cls, r: Dict[str, Any]) -> "RemediationPlan":
        return cls(
            topic=r.get("topic") or "",
            explanation=r.get("explanation") or "",
            steps=[RemediationStep(int(s.get("step") or i + 1), s.get("action") or "", s.get("resource"))
                   for i, s in enumerate(r.get("steps") or [])],
            quiz_question=r.get("quiz_question") or r.get("quizQuestion") or "",
        )


# ---------- user ----------
@dataclass
class UserSettings:
    notifications: bool = True
    sound_enabled: bool = True


@dataclass
class UserData:
    tasks: List[Task] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    profile: Optional[StudentProfile] = None

    @classmethod
    def from_record(cls, r: Optional[Dict[str, Any]]) -> "UserData":
        r = r or {}
        profile = r.get("profile")
        return cls(
            tasks=[Task.from_record(t) for t in r.get("tasks") or []],
            projects=[Project.from_record(p) for p in r.get("projects") or []],
            profile=StudentProfile.from_record(profile) if isinstance(profile, dict) else None,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "tasks": [t.to_record() for t in self.tasks],
            "projects": [p.to_record() for p in self.projects],
            "profile": self.profile.to_record() if self.profile else None,
        }
