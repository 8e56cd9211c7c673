"""
Lista de tareas scrolleable para la agenda del día.

Cada tarea es una fila (Frame) dentro de un Canvas con scroll:
- Checkbutton para marcarla como completada
- texto "HH:MM · título (duración)"
- etiquetas de color (categoría, estado)
- botón ⋮ con menú (eliminar / tomar en el pomodoro)

La vista no guarda estado propio: todos los cambios pasan por callbacks que
provee la pestaña (y esta al controller).
"""
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple
import tkinter as tk
from tkinter import ttk

from core.models import Task
from services.schedule import add_minutes, format_minutes

CATEGORY_COLORS = {
    "study": "#3B82F6",
    "project": "#A78BFA",
    "break": "#22C55E",
    "review": "#EAB308",
}
CATEGORY_LABELS = {
    "study": "Estudio",
    "project": "Proyecto",
    "break": "Descanso",
    "review": "Repaso",
}


class TaskRow(ttk.Frame):
    def __init__(
        self,
        master,
        task_id: str,
        text: str,
        done: bool = False,
        tags: Optional[List[Tuple[str, str]]] = None,  # [(label, hex_color)]
        on_toggle: Optional[Callable[[str], None]] = None,
        on_menu: Optional[Callable[[str], None]] = None,
        wrap: int = 600,
    ):
        super().__init__(master)
        self.task_id = task_id
        self._on_toggle = on_toggle
        self._on_menu = on_menu
        self.var = tk.BooleanVar(value=done)

        self.columnconfigure(1, weight=1)

        self.chk = ttk.Checkbutton(self, variable=self.var, command=self._toggle)
        self.chk.grid(row=0, column=0, padx=(8, 6), pady=4, sticky="w")

        self.lbl = ttk.Label(self, text=text, wraplength=wrap, anchor="w", justify="left")
        self.lbl.grid(row=0, column=1, sticky="we")

        self.tag_container = ttk.Frame(self)
        self.tag_container.grid(row=1, column=1, sticky="w", pady=(2, 4))

        self.menu_btn = ttk.Button(self, text="⋮", width=2, command=self._menu)
        self.menu_btn.grid(row=0, column=2, padx=(6, 8))

        self._render_tags(tags or [])
        self._apply_done_style(done)

    def _render_tags(self, tags: List[Tuple[str, str]]):
        for label, color in tags:
            # tk.Label para poder pintar el fondo sin estilos ttk
            tk.Label(
                self.tag_container,
                text=label,
                bg=color,
                fg=ideal_text_color(color),
                padx=4,
                pady=2,
                borderwidth=0,
            ).pack(side="left", padx=(0, 6))

    def _apply_done_style(self, done: bool):
        self.lbl.configure(style="Task.Done.TLabel" if done else "Task.Normal.TLabel")

    def _toggle(self):
        self._apply_done_style(bool(self.var.get()))
        if self._on_toggle:
            self._on_toggle(self.task_id)

    def _menu(self):
        if self._on_menu:
            self._on_menu(self.task_id)


class ScrollableTaskList(ttk.Frame):
    """Canvas + Frame interior con soporte de rueda del mouse."""
    def __init__(
        self,
        master,
        on_toggle: Optional[Callable[[str], None]] = None,
        on_menu: Optional[Callable[[str], None]] = None,
        row_wrap: int = 600,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._on_toggle = on_toggle
        self._on_menu = on_menu
        self._row_wrap = row_wrap
        self._rows: Dict[str, TaskRow] = {}

        style = ttk.Style(self)
        style.configure("Task.Normal.TLabel")
        style.configure("Task.Done.TLabel", foreground="#888888")

        self.canvas = tk.Canvas(self, highlightthickness=0)
        self.vbar = ttk.Scrollbar(self, orient="vertical", command=self.canvas.yview)
        self.canvas.configure(yscrollcommand=self.vbar.set)
        self.canvas.grid(row=0, column=0, sticky="nsew")
        self.vbar.grid(row=0, column=1, sticky="ns")
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.interior = ttk.Frame(self.canvas)
        self.interior.columnconfigure(0, weight=1)
        self._win_id = self.canvas.create_window(0, 0, window=self.interior, anchor="nw")
        self.empty_lbl = ttk.Label(self.interior, text="No hay tareas para este día.", foreground="#888888")

        self.interior.bind("<Configure>", lambda _e: self._update_scrollregion())
        self.canvas.bind("<Configure>", self._on_canvas_configure)
        self.canvas.bind("<Enter>", lambda _e: self._bind_mousewheel())
        self.canvas.bind("<Leave>", lambda _e: self._unbind_mousewheel())

    def set_tasks(self, tasks: List[Task]):
        """Reemplaza todas las filas; las tareas ya vienen ordenadas por hora."""
        for row in self._rows.values():
            row.destroy()
        self._rows.clear()

        for i, task in enumerate(tasks):
            row = TaskRow(
                self.interior,
                task_id=task.id,
                text=task_text(task),
                done=task.completed,
                tags=task_tags(task),
                on_toggle=self._on_toggle,
                on_menu=self._on_menu,
                wrap=self._row_wrap,
            )
            row.grid(row=i, column=0, sticky="we", padx=8, pady=2)
            self._rows[task.id] = row

        if tasks:
            self.empty_lbl.grid_forget()
        else:
            self.empty_lbl.grid(row=0, column=0, pady=24)
        self._update_scrollregion()

    def _update_scrollregion(self):
        self.canvas.configure(scrollregion=self.canvas.bbox("all"))

    def _on_canvas_configure(self, event):
        self.canvas.itemconfigure(self._win_id, width=event.width)
        for row in self._rows.values():
            row.lbl.configure(wraplength=max(120, event.width - 140))

    def _bind_mousewheel(self):
        self.canvas.bind_all("<MouseWheel>", self._on_mousewheel)
        self.canvas.bind_all("<Button-4>", self._on_mousewheel_linux)
        self.canvas.bind_all("<Button-5>", self._on_mousewheel_linux)

    def _unbind_mousewheel(self):
        for seq in ("<MouseWheel>", "<Button-4>", "<Button-5>"):
            self.canvas.unbind_all(seq)

    def _on_mousewheel(self, event):
        self.canvas.yview_scroll(int(-1 * (event.delta / 120)), "units")

    def _on_mousewheel_linux(self, event):
        self.canvas.yview_scroll(-1 if event.num == 4 else 1, "units")


def task_text(task: Task) -> str:
    end = add_minutes(task.start_time, task.duration)
    return f"{task.start_time}–{end} · {task.title} ({format_minutes(task.duration)})"


def task_tags(task: Task) -> List[Tuple[str, str]]:
    tags = [(CATEGORY_LABELS.get(task.category, task.category), CATEGORY_COLORS.get(task.category, "#CBD5E1"))]
    if task.completed:
        tags.append(("✓", "#10B981"))
    if task.actual_duration:
        tags.append((f"Real {format_minutes(task.actual_duration)}", "#CBD5E1"))
    return tags


def ideal_text_color(bg_hex: str) -> str:
    """Negro o blanco según el brillo del fondo."""
    bg_hex = bg_hex.strip().lstrip('#')
    if len(bg_hex) == 3:
        bg_hex = ''.join(c * 2 for c in bg_hex)
    try:
        r, g, b = (int(bg_hex[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return "black"
    luminance = 0.299 * r + 0.587 * g + 0.114 * b
    return "black" if luminance > 186 else "white"
