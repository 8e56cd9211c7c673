import datetime as dt
import tkinter as tk
from tkinter import ttk, messagebox as mb, simpledialog

from loguru import logger

from core.config import TOPMOST, WINDOW_GEOMETRY
from core.models import CATEGORIES, normalize_hhmm
from controller.app_controller import AppController
from gui.onboarding import OnboardingDialog
from gui.panels import (
    CommunityTab,
    DashboardTab,
    FeedbackTab,
    ForumTab,
    NotesTab,
    ProfileTab,
    ProjectsTab,
    TutorTab,
)
from gui.pomodoro_view import PomodoroTab
from gui.task_list import CATEGORY_LABELS, ScrollableTaskList
from services.schedule import find_task


class MainWindow(tk.Tk):
    def __init__(self, controller: AppController):
        super().__init__()
        self.controller = controller
        self.title("SmartStudy")
        self.geometry(WINDOW_GEOMETRY)
        self.configure(padx=8, pady=8)
        if TOPMOST:
            self.attributes("-topmost", True)

        # Top bar
        top = ttk.Frame(self)
        top.pack(fill="x", pady=(0, 6))
        ttk.Button(top, text="Sync", command=self._sync_all).pack(side="right")
        ttk.Label(top, text=controller.username, font=("Segoe UI", 10, "bold")).pack(side="right", padx=8)
        self.status_var = tk.StringVar(value="Listo")
        ttk.Label(top, textvariable=self.status_var).pack(side="left")

        self.nb = ttk.Notebook(self)
        self.nb.pack(fill="both", expand=True)

        self.dashboard = DashboardTab(self.nb, controller)
        self.schedule = ScheduleTab(self.nb, controller, on_change=self._on_tasks_changed,
                                    on_take=lambda task: self.pomodoro.take_task(task))
        self.pomodoro = PomodoroTab(self.nb, controller, on_status=self.status_var.set)
        self.projects = ProjectsTab(self.nb, controller)
        self.notes = NotesTab(self.nb, controller)
        self.forum = ForumTab(self.nb, controller)
        self.profile = ProfileTab(self.nb, controller, on_retake=self.show_onboarding)
        self.tutor = TutorTab(self.nb, controller)
        self.feedback = FeedbackTab(self.nb, controller)
        self.community = CommunityTab(self.nb, controller)
        for tab, text in (
            (self.dashboard, "Tablero"), (self.schedule, "Agenda"), (self.pomodoro, "Pomodoro"),
            (self.projects, "Proyectos"), (self.notes, "Notas"), (self.forum, "Foro"),
            (self.profile, "Perfil SSR"), (self.tutor, "Tutor IA"), (self.feedback, "Feedback"),
            (self.community, "Comunidad"),
        ):
            self.nb.add(tab, text=text)

        # las pestañas con datos remotos se recargan al entrar
        self.nb.bind("<<NotebookTabChanged>>", self._on_tab_changed)
        self.bind("<F5>", lambda e: self._sync_all())
        self._sync_all()

    # ---------- sync ----------
    def _sync_all(self):
        self.controller.load_user()
        for tab in (self.dashboard, self.schedule, self.projects, self.profile):
            tab.refresh()
        self.pomodoro.refresh_tasks()
        self.status_var.set(f"Sincronizado {dt.datetime.now().strftime('%H:%M:%S')} · "
                            f"{len(self.controller.data.tasks)} tareas")

    def _on_tab_changed(self, _event=None):
        current = self.nametowidget(self.nb.select())
        if current in (self.dashboard, self.projects, self.profile, self.notes, self.forum,
                       self.tutor, self.feedback, self.community):
            current.refresh()

    def _on_tasks_changed(self):
        self.dashboard.refresh()
        self.pomodoro.refresh_tasks()

    # ---------- onboarding ----------
    def show_onboarding(self):
        OnboardingDialog(self, self.controller, on_done=self._on_onboarding_done)

    def _on_onboarding_done(self, profile):
        logger.info(f"Onboarding finished for {profile.name}")
        self.schedule.refresh()
        self._on_tasks_changed()
        self.profile.refresh()
        self.nb.select(self.profile)


class ScheduleTab(ttk.Frame):
    def __init__(self, parent, controller: AppController, on_change=None, on_take=None):
        super().__init__(parent, padding=8)
        self.controller = controller
        self._on_change = on_change
        self._on_take = on_take
        self.day = dt.date.today()

        # navegación por día
        nav = ttk.Frame(self)
        nav.pack(fill="x")
        ttk.Button(nav, text="◀", width=3, command=lambda: self._shift_day(-1)).pack(side="left")
        self.day_var = tk.StringVar()
        ttk.Label(nav, textvariable=self.day_var, width=16, anchor="center").pack(side="left", padx=4)
        ttk.Button(nav, text="▶", width=3, command=lambda: self._shift_day(1)).pack(side="left")
        ttk.Button(nav, text="Hoy", command=self._today).pack(side="left", padx=(8, 0))

        # alta de tarea
        form = ttk.LabelFrame(self, text="Nueva tarea", padding=6)
        form.pack(fill="x", pady=6)
        self.title_var = tk.StringVar()
        self.start_var = tk.StringVar(value="09:00")
        self.duration_var = tk.IntVar(value=60)
        self.category_var = tk.StringVar(value=CATEGORY_LABELS["study"])
        self.split_var = tk.BooleanVar(value=True)
        entry = ttk.Entry(form, textvariable=self.title_var)
        entry.pack(side="left", fill="x", expand=True)
        entry.bind("<Return>", self._on_add)
        ttk.Entry(form, textvariable=self.start_var, width=6).pack(side="left", padx=4)
        ttk.Spinbox(form, from_=5, to=480, increment=5, textvariable=self.duration_var, width=5).pack(side="left")
        ttk.Label(form, text="min").pack(side="left", padx=(2, 6))
        ttk.Combobox(form, textvariable=self.category_var, state="readonly", width=10,
                     values=[CATEGORY_LABELS[c] for c in CATEGORIES]).pack(side="left")
        ttk.Checkbutton(form, text="Dividir en pomodoros", variable=self.split_var).pack(side="left", padx=6)
        ttk.Button(form, text="Agregar", command=self._on_add).pack(side="left")

        self.task_list = ScrollableTaskList(self, on_toggle=self._on_toggle, on_menu=self._on_menu)
        self.task_list.pack(fill="both", expand=True)

    def refresh(self):
        date = self.day.isoformat()
        self.day_var.set(self.day.strftime("%a %d/%m/%Y"))
        self.task_list.set_tasks(self.controller.tasks_for(date))

    def _shift_day(self, days: int):
        self.day += dt.timedelta(days=days)
        self.refresh()

    def _today(self):
        self.day = dt.date.today()
        self.refresh()

    def _changed(self):
        self.refresh()
        if self._on_change:
            self._on_change()

    # ---------- acciones ----------
    def _on_add(self, event=None):
        try:
            start = normalize_hhmm(self.start_var.get())
            duration = int(self.duration_var.get())
        except (ValueError, tk.TclError):
            mb.showwarning("Agenda", "Hora (HH:MM) o duración inválida.", parent=self)
            return
        category = next((c for c in CATEGORIES if CATEGORY_LABELS[c] == self.category_var.get()), "study")
        created = self.controller.add_task(self.title_var.get(), self.day.isoformat(), start, duration,
                                           category=category, auto_split=self.split_var.get())
        if created:
            self.title_var.set("")
            self._changed()

    def _on_toggle(self, task_id: str):
        self.controller.toggle_task(task_id)
        self._changed()

    def _on_menu(self, task_id: str):
        task = find_task(self.controller.data.tasks, task_id)
        if task is None:
            return
        menu = tk.Menu(self, tearoff=False)
        menu.add_command(label="Tomar en el pomodoro", command=lambda: self._to_pomodoro(task_id))
        menu.add_command(label="Registrar tiempo real…", command=lambda: self._actual_time(task_id))
        menu.add_separator()
        menu.add_command(label="Eliminar", command=lambda: self._delete(task_id))
        try:
            menu.tk_popup(self.winfo_pointerx(), self.winfo_pointery())
        finally:
            menu.grab_release()

    def _to_pomodoro(self, task_id: str):
        task = find_task(self.controller.data.tasks, task_id)
        if self._on_take:
            self._on_take(task)
        else:
            self.controller.pomodoro.select_task(task)

    def _actual_time(self, task_id: str):
        minutes = simpledialog.askinteger("Tiempo real", "Minutos dedicados:", parent=self, minvalue=0)
        if minutes is not None:
            self.controller.update_task(task_id, actual_duration=minutes or None)
            self._changed()

    def _delete(self, task_id: str):
        if self.controller.delete_task(task_id):
            self._changed()
