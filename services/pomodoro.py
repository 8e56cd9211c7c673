"""
Temporizador pomodoro con sincronización automática contra la agenda.

El timer solo guarda estado y lo mueve el loop de la UI: ``tick()`` cada pocos
ms para la cuenta regresiva y ``sync_with_schedule()`` una vez por minuto para
elegir la tarea que toca ahora. La hora se pasa siempre como argumento.
"""
from __future__ import annotations
import datetime as dt
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from loguru import logger

from core.models import Task
from services.schedule import parse_hhmm


class PomodoroMode(str, Enum):
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


MODE_MINUTES = {
    PomodoroMode.FOCUS: 25,
    PomodoroMode.SHORT_BREAK: 5,
    PomodoroMode.LONG_BREAK: 15,
}
MODE_LABELS = {
    PomodoroMode.FOCUS: "Concentración",
    PomodoroMode.SHORT_BREAK: "Descanso corto",
    PomodoroMode.LONG_BREAK: "Descanso largo",
}
LONG_BREAK_MIN = 15


def mode_for_task(task: Task) -> PomodoroMode:
    if task.category == "break":
        return PomodoroMode.LONG_BREAK if task.duration >= LONG_BREAK_MIN else PomodoroMode.SHORT_BREAK
    return PomodoroMode.FOCUS


def current_task(tasks: Iterable[Task], now: dt.datetime) -> Optional[Task]:
    """Primera tarea sin completar del día de ``now`` cuyo bloque contiene el minuto actual."""
    today = now.date().isoformat()
    minute = now.hour * 60 + now.minute
    for t in tasks:
        if t.date != today or t.completed:
            continue
        start = parse_hhmm(t.start_time)
        if start <= minute < start + t.duration:
            return t
    return None


@dataclass
class PomodoroState:
    mode: PomodoroMode = PomodoroMode.FOCUS
    time_left: int = MODE_MINUTES[PomodoroMode.FOCUS] * 60  # segundos
    is_active: bool = False
    end_time: Optional[dt.datetime] = None
    selected_task_id: Optional[str] = None
    auto_sync: bool = True


class PomodoroTimer:
    def __init__(self, state: Optional[PomodoroState] = None):
        self.state = state or PomodoroState()

    # --- controles ---
    def toggle(self, now: dt.datetime) -> None:
        s = self.state
        if s.is_active:
            s.is_active = False
            s.end_time = None
        else:
            s.is_active = True
            s.end_time = now + dt.timedelta(seconds=s.time_left)

    def reset(self) -> None:
        self.change_mode(self.state.mode)

    def change_mode(self, mode: PomodoroMode) -> None:
        s = self.state
        s.mode = PomodoroMode(mode)
        s.is_active = False
        s.end_time = None
        s.time_left = MODE_MINUTES[s.mode] * 60

    def manual_mode(self, mode: PomodoroMode) -> None:
        self.change_mode(mode)
        self.state.auto_sync = False

    def set_auto_sync(self, enabled: bool) -> None:
        self.state.auto_sync = enabled

    def select_task(self, task: Optional[Task]) -> None:
        """Selección manual; apaga el auto-sync."""
        self.state.auto_sync = False
        self.state.selected_task_id = task.id if task else None
        self.change_mode(mode_for_task(task) if task else PomodoroMode.FOCUS)

    # --- callbacks periódicos ---
    def tick(self, now: dt.datetime) -> bool:
        """Recalcula el tiempo restante desde ``end_time``. True si la sesión acaba de terminar."""
        s = self.state
        if not s.is_active or s.end_time is None:
            return False
        s.time_left = max(0, math.ceil((s.end_time - now).total_seconds()))
        if s.time_left == 0:
            s.is_active = False
            s.end_time = None
            logger.info(f"Pomodoro finished: {s.mode.value}")
            return True
        return False

    def sync_with_schedule(self, tasks: Iterable[Task], now: dt.datetime) -> Optional[Task]:
        if not self.state.auto_sync:
            return None
        task = current_task(tasks, now)
        if task is None or task.id == self.state.selected_task_id:
            return None
        self.state.selected_task_id = task.id
        self.change_mode(mode_for_task(task))
        logger.debug(f"Auto-sync selected task {task.id} ({self.state.mode.value})")
        return task

    # --- vista ---
    def progress(self) -> float:
        total = MODE_MINUTES[self.state.mode] * 60
        return (total - self.state.time_left) / total * 100

    def format_time(self) -> Tuple[str, str]:
        m, s = divmod(self.state.time_left, 60)
        return f"{m:02d}", f"{s:02d}"
