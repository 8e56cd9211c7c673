"""
Agenda: auto-división de bloques de estudio en pomodoros y estadísticas del tablero.
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from core.models import CATEGORIES, Project, Task

STUDY_BLOCK_MIN = 25
BREAK_BLOCK_MIN = 5
MIN_SPLIT_DURATION = 30
BREAK_TITLE = "Descanso"
BREAK_DESCRIPTION = "Descansá la vista, estirate."


def _new_id() -> str:
    return uuid.uuid4().hex


def parse_hhmm(value: str) -> int:
    """'HH:MM' -> minutos desde medianoche."""
    h, m = value.split(":")
    return int(h) * 60 + int(m)


def add_minutes(hhmm: str, minutes: int) -> str:
    total = (parse_hhmm(hhmm) + minutes) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def split_study_block(
    title: str,
    date: str,
    start_time: str,
    duration: int,
    category: str = "study",
    description: str = "",
    auto_split: bool = True,
) -> List[Task]:
    """Expande un bloque de estudio en tareas estudio/descanso alternadas.

    Solo se divide si ``auto_split`` está activo, la categoría es ``study`` y el
    bloque dura al menos 30 minutos. Cada ciclo es un bloque de estudio de hasta
    25 minutos seguido de un descanso de 5 si queda tiempo para él; un resto
    menor a 5 minutos después de un bloque de estudio se descarta.
    """
    if not (auto_split and category == "study" and duration >= MIN_SPLIT_DURATION):
        return [Task(id=_new_id(), title=title, date=date, start_time=start_time, duration=duration,
                     category=category, description=description)]

    tasks: List[Task] = []
    remaining = duration
    current = start_time
    cycle = 0
    while remaining > 0:
        study = min(STUDY_BLOCK_MIN, remaining)
        tasks.append(Task(id=_new_id(), title=f"{title} ({cycle + 1})", date=date, start_time=current,
                          duration=study, category="study", description=description))
        current = add_minutes(current, study)
        remaining -= study

        if remaining >= BREAK_BLOCK_MIN:
            tasks.append(Task(id=_new_id(), title=BREAK_TITLE, date=date, start_time=current,
                              duration=BREAK_BLOCK_MIN, category="break", description=BREAK_DESCRIPTION))
            current = add_minutes(current, BREAK_BLOCK_MIN)
            remaining -= BREAK_BLOCK_MIN
        elif remaining > 0:
            remaining = 0
        cycle += 1
    return tasks


def sort_by_start(tasks: Iterable[Task]) -> List[Task]:
    return sorted(tasks, key=lambda t: parse_hhmm(t.start_time))


def tasks_for_day(tasks: Iterable[Task], date: str) -> List[Task]:
    return sort_by_start(t for t in tasks if t.date == date)


# ---------- estadísticas ----------
def format_minutes(minutes: int) -> str:
    h, m = divmod(int(minutes), 60)
    if h > 0:
        return f"{h}h {m}m" if m else f"{h}h"
    return f"{m}m"


def _actual_minutes(task: Task) -> int:
    if task.actual_duration:
        return task.actual_duration
    return task.duration if task.completed else 0


def _percent(part: int, whole: int) -> int:
    # redondeo "half up"
    return int(part * 100 / whole + 0.5) if whole else 0


@dataclass
class DashboardStats:
    total_tasks: int = 0
    completed_tasks: int = 0
    completion_rate: int = 0
    expected_minutes: int = 0
    actual_minutes: int = 0
    category_minutes: Dict[str, int] = field(default_factory=dict)
    category_hours: List[Tuple[str, float]] = field(default_factory=list)
    project_progress: List[Tuple[str, int]] = field(default_factory=list)


def dashboard_stats(tasks: List[Task], projects: List[Project]) -> DashboardStats:
    completed = [t for t in tasks if t.completed]
    category_minutes = {c: 0 for c in CATEGORIES}
    for t in tasks:
        if t.category in category_minutes:
            category_minutes[t.category] += t.actual_duration or t.duration or 0
    return DashboardStats(
        total_tasks=len(tasks),
        completed_tasks=len(completed),
        completion_rate=_percent(len(completed), len(tasks)),
        expected_minutes=sum(t.duration for t in tasks),
        actual_minutes=sum(_actual_minutes(t) for t in tasks),
        category_minutes=category_minutes,
        category_hours=[(c, round(m / 60, 1)) for c, m in category_minutes.items() if round(m / 60, 1) > 0],
        project_progress=[(p.name, p.progress) for p in projects],
    )


@dataclass
class TrendStats:
    total_users: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    completion_rate: int = 0
    avg_tasks_per_user: float = 0.0
    avg_study_hours_per_user: float = 0.0
    category_counts: Dict[str, int] = field(default_factory=dict)


def community_trends(task_lists: List[List[Task]]) -> TrendStats:
    """Agrega las tareas de todos los usuarios (una lista por usuario)."""
    users = len(task_lists)
    all_tasks = [t for tasks in task_lists for t in tasks]
    completed = sum(1 for t in all_tasks if t.completed)
    study_minutes = sum(_actual_minutes(t) for t in all_tasks)
    counts = {c: 0 for c in CATEGORIES}
    for t in all_tasks:
        if t.category in counts:
            counts[t.category] += 1
    return TrendStats(
        total_users=users,
        total_tasks=len(all_tasks),
        completed_tasks=completed,
        completion_rate=_percent(completed, len(all_tasks)),
        avg_tasks_per_user=round(len(all_tasks) / users, 1) if users else 0.0,
        avg_study_hours_per_user=round(study_minutes / 60 / users, 1) if users else 0.0,
        category_counts=counts,
    )


def find_task(tasks: Iterable[Task], task_id: Optional[str]) -> Optional[Task]:
    return next((t for t in tasks if t.id == task_id), None)
