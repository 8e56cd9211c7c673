import datetime as dt
import tkinter as tk
from tkinter import ttk

from loguru import logger

from core.config import SYNC_INTERVAL_MS, TICK_INTERVAL_MS
from controller.app_controller import AppController
from services.pomodoro import MODE_LABELS, PomodoroMode
from services.schedule import find_task, sort_by_start


class PomodoroTab(ttk.Frame):
    """Temporizador pomodoro con auto-sync contra la agenda de hoy.

    Dos loops con ``after``: la cuenta regresiva cada TICK_INTERVAL_MS y la
    sincronización con la agenda cada SYNC_INTERVAL_MS. Los handles se cancelan
    con ``after_cancel`` al destruir la pestaña.
    """
    def __init__(self, parent, controller: AppController, on_status=None):
        super().__init__(parent, padding=12)
        self.controller = controller
        self.timer = controller.pomodoro
        self._on_status = on_status
        self._tick_job = None
        self._sync_job = None
        self._task_ids = []

        # modos
        modes = ttk.Frame(self)
        modes.pack(pady=(0, 10))
        for mode in PomodoroMode:
            ttk.Button(modes, text=MODE_LABELS[mode],
                       command=lambda m=mode: self._on_mode(m)).pack(side="left", padx=4)

        self.time_var = tk.StringVar()
        ttk.Label(self, textvariable=self.time_var, font=("Segoe UI", 48, "bold")).pack()
        self.mode_var = tk.StringVar()
        ttk.Label(self, textvariable=self.mode_var).pack()
        self.progress = ttk.Progressbar(self, maximum=100, length=320)
        self.progress.pack(pady=8)

        controls = ttk.Frame(self)
        controls.pack(pady=6)
        self.toggle_btn = ttk.Button(controls, text="Iniciar", command=self._on_toggle)
        self.toggle_btn.pack(side="left", padx=4)
        ttk.Button(controls, text="Reiniciar", command=self._on_reset).pack(side="left", padx=4)

        # tarea actual
        task_box = ttk.LabelFrame(self, text="Tarea", padding=8)
        task_box.pack(fill="x", pady=(12, 0))
        self.task_combo = ttk.Combobox(task_box, state="readonly")
        self.task_combo.pack(side="left", fill="x", expand=True)
        self.task_combo.bind("<<ComboboxSelected>>", self._on_task_selected)
        self.auto_var = tk.BooleanVar(value=self.timer.state.auto_sync)
        ttk.Checkbutton(task_box, text="Sincronizar con la agenda", variable=self.auto_var,
                        command=self._on_auto_toggle).pack(side="left", padx=(8, 0))

        self.refresh_tasks()
        self._render()
        self._tick_job = self.after(TICK_INTERVAL_MS, self._tick)
        self._sync_job = self.after(0, self._auto_sync)

    # ---------- loops ----------
    def _tick(self):
        try:
            if self.timer.tick(dt.datetime.now()):
                self.bell()
                self._status(f"{MODE_LABELS[self.timer.state.mode]} terminado")
            self._render()
        finally:
            self._tick_job = self.after(TICK_INTERVAL_MS, self._tick)

    def _auto_sync(self):
        try:
            task = self.controller.sync_pomodoro(dt.datetime.now())
            if task is not None:
                self.refresh_tasks()
                self._status(f"Pomodoro: {task.title}")
                self._render()
        finally:
            self._sync_job = self.after(SYNC_INTERVAL_MS, self._auto_sync)

    def destroy(self):
        for job in (self._tick_job, self._sync_job):
            if job is not None:
                self.after_cancel(job)
        self._tick_job = self._sync_job = None
        super().destroy()

    # ---------- acciones ----------
    def _on_toggle(self):
        self.timer.toggle(dt.datetime.now())
        self._render()

    def _on_reset(self):
        self.timer.reset()
        self._render()

    def _on_mode(self, mode: PomodoroMode):
        self.timer.manual_mode(mode)
        self.auto_var.set(False)
        self._render()

    def _on_auto_toggle(self):
        self.timer.set_auto_sync(self.auto_var.get())
        if self.auto_var.get():
            self.controller.sync_pomodoro(dt.datetime.now())
            self.refresh_tasks()
            self._render()

    def take_task(self, task):
        """Toma una tarea desde la agenda (selección manual, sin auto-sync)."""
        self.timer.select_task(task)
        self.auto_var.set(False)
        self.refresh_tasks()
        self._render()

    def _on_task_selected(self, _event=None):
        idx = self.task_combo.current()
        if idx < 0 or idx >= len(self._task_ids):
            return
        task = find_task(self.controller.data.tasks, self._task_ids[idx])
        self.timer.select_task(task)
        self.auto_var.set(False)
        logger.debug(f"Manual pomodoro task: {task.title if task else None}")
        self._render()

    # ---------- render ----------
    def refresh_tasks(self):
        today = dt.date.today().isoformat()
        tasks = sort_by_start(t for t in self.controller.data.tasks if t.date == today and not t.completed)
        self._task_ids = [t.id for t in tasks]
        self.task_combo["values"] = [f"{t.start_time} · {t.title}" for t in tasks]
        selected = self.timer.state.selected_task_id
        if selected in self._task_ids:
            self.task_combo.current(self._task_ids.index(selected))
        else:
            self.task_combo.set("")

    def _render(self):
        m, s = self.timer.format_time()
        self.time_var.set(f"{m}:{s}")
        self.mode_var.set(MODE_LABELS[self.timer.state.mode])
        self.progress["value"] = self.timer.progress()
        self.toggle_btn.configure(text="Pausar" if self.timer.state.is_active else "Iniciar")

    def _status(self, text: str):
        if self._on_status:
            self._on_status(text)
