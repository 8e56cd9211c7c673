"""Pestañas secundarias: tablero, proyectos, notas, foro, perfil SSR, tutor, feedback y comunidad."""
import tkinter as tk
from tkinter import ttk, messagebox as mb

from core.config import NOTE_AUTOSAVE_MS
from core.models import FEEDBACK_TYPES, ChecklistItem
from controller.app_controller import AppController
from services.forum import filter_by_tag, tag_counts
from services.schedule import format_minutes
from gui.task_list import CATEGORY_LABELS


class DashboardTab(ttk.Frame):
    def __init__(self, parent, controller: AppController):
        super().__init__(parent, padding=12)
        self.controller = controller
        self.summary_var = tk.StringVar()
        ttk.Label(self, textvariable=self.summary_var, font=("Segoe UI", 12)).pack(anchor="w")

        self.categories = ttk.Treeview(self, columns=("hours",), show="tree headings", height=5)
        self.categories.heading("#0", text="Categoría")
        self.categories.heading("hours", text="Horas")
        self.categories.pack(fill="x", pady=8)

        ttk.Label(self, text="Proyectos").pack(anchor="w", pady=(8, 0))
        self.projects = ttk.Frame(self)
        self.projects.pack(fill="x")

    def refresh(self):
        stats = self.controller.dashboard()
        self.summary_var.set(
            f"{stats.completed_tasks}/{stats.total_tasks} tareas · {stats.completion_rate}% completado · "
            f"planificado {format_minutes(stats.expected_minutes)} · real {format_minutes(stats.actual_minutes)}"
        )
        self.categories.delete(*self.categories.get_children())
        for cat, hours in stats.category_hours:
            self.categories.insert("", "end", text=CATEGORY_LABELS.get(cat, cat), values=(hours,))

        for child in self.projects.winfo_children():
            child.destroy()
        for name, progress in stats.project_progress:
            row = ttk.Frame(self.projects)
            row.pack(fill="x", pady=2)
            ttk.Label(row, text=name, width=30).pack(side="left")
            ttk.Progressbar(row, maximum=100, value=progress, length=240).pack(side="left", padx=6)
            ttk.Label(row, text=f"{progress}%").pack(side="left")


class ProjectsTab(ttk.Frame):
    def __init__(self, parent, controller: AppController):
        super().__init__(parent, padding=12)
        self.controller = controller

        form = ttk.Frame(self)
        form.pack(fill="x", pady=(0, 8))
        self.name_var = tk.StringVar()
        self.deadline_var = tk.StringVar()
        self.progress_var = tk.IntVar(value=0)
        ttk.Label(form, text="Proyecto:").pack(side="left")
        ttk.Entry(form, textvariable=self.name_var, width=28).pack(side="left", padx=4)
        ttk.Label(form, text="Entrega (YYYY-MM-DD):").pack(side="left")
        ttk.Entry(form, textvariable=self.deadline_var, width=12).pack(side="left", padx=4)
        ttk.Spinbox(form, from_=0, to=100, increment=5, textvariable=self.progress_var, width=5).pack(side="left")
        ttk.Button(form, text="Agregar", command=self._on_add).pack(side="left", padx=4)

        self.tree = ttk.Treeview(self, columns=("deadline", "progress"), show="tree headings")
        self.tree.heading("#0", text="Nombre")
        self.tree.heading("deadline", text="Entrega")
        self.tree.heading("progress", text="Progreso")
        self.tree.pack(fill="both", expand=True)

        actions = ttk.Frame(self)
        actions.pack(fill="x", pady=(6, 0))
        ttk.Button(actions, text="+10%", command=lambda: self._bump(10)).pack(side="left")
        ttk.Button(actions, text="-10%", command=lambda: self._bump(-10)).pack(side="left", padx=4)
        ttk.Button(actions, text="Eliminar", command=self._on_delete).pack(side="right")

    def refresh(self):
        self.tree.delete(*self.tree.get_children())
        for p in self.controller.data.projects:
            self.tree.insert("", "end", iid=p.id, text=p.name, values=(p.deadline, f"{p.progress}%"))

    def _selected(self):
        sel = self.tree.selection()
        return sel[0] if sel else None

    def _on_add(self):
        try:
            progress = int(self.progress_var.get())
        except (tk.TclError, ValueError):
            progress = 0
        if self.controller.add_project(self.name_var.get(), self.deadline_var.get().strip(), progress):
            self.name_var.set("")
            self.deadline_var.set("")
            self.progress_var.set(0)
            self.refresh()

    def _bump(self, delta: int):
        pid = self._selected()
        project = next((p for p in self.controller.data.projects if p.id == pid), None)
        if project:
            self.controller.update_project(pid, progress=max(0, min(100, project.progress + delta)))
            self.refresh()

    def _on_delete(self):
        pid = self._selected()
        if pid and mb.askyesno("Proyectos", "¿Eliminar el proyecto?", parent=self):
            self.controller.delete_project(pid)
            self.refresh()


class NotesTab(ttk.Frame):
    """Lista + editor. Los cambios se guardan solos (debounce de NOTE_AUTOSAVE_MS)."""
    def __init__(self, parent, controller: AppController):
        super().__init__(parent, padding=12)
        self.controller = controller
        self.current = None
        self._save_job = None
        self._loading = False

        left = ttk.Frame(self)
        left.pack(side="left", fill="y")
        self.search_var = tk.StringVar()
        self.search_var.trace_add("write", lambda *_: self._render_list())
        ttk.Entry(left, textvariable=self.search_var).pack(fill="x")
        self.listbox = tk.Listbox(left, width=28, exportselection=False)
        self.listbox.pack(fill="y", expand=True, pady=4)
        self.listbox.bind("<<ListboxSelect>>", self._on_select)
        btns = ttk.Frame(left)
        btns.pack(fill="x")
        ttk.Button(btns, text="Nota", command=lambda: self._on_new("text")).pack(side="left")
        ttk.Button(btns, text="Checklist", command=lambda: self._on_new("checklist")).pack(side="left", padx=4)
        ttk.Button(btns, text="Eliminar", command=self._on_delete).pack(side="right")

        right = ttk.Frame(self)
        right.pack(side="left", fill="both", expand=True, padx=(10, 0))
        self.title_var = tk.StringVar()
        self.title_var.trace_add("write", lambda *_: self._schedule_save())
        ttk.Entry(right, textvariable=self.title_var, font=("Segoe UI", 12, "bold")).pack(fill="x")
        self.text = tk.Text(right, wrap="word", height=12)
        self.text.pack(fill="both", expand=True, pady=6)
        self.text.bind("<<Modified>>", self._on_text_modified)
        self.items_box = ttk.Frame(right)
        self.items_box.pack(fill="x")

        self._visible = []

    def refresh(self):
        self.controller.load_notes()
        self._render_list()

    def _render_list(self):
        self._visible = self.controller.search_notes(self.search_var.get())
        self.listbox.delete(0, "end")
        for n in self._visible:
            self.listbox.insert("end", n.title or "(sin título)")

    def _on_select(self, _event=None):
        sel = self.listbox.curselection()
        if not sel:
            return
        self._flush()
        self.current = self._visible[sel[0]]
        self._load_editor()

    def _load_editor(self):
        self._loading = True
        try:
            self.title_var.set(self.current.title if self.current else "")
            self.text.delete("1.0", "end")
            if self.current:
                self.text.insert("1.0", self.current.content)
            self.text.edit_modified(False)
            self._render_items()
        finally:
            self._loading = False

    def _render_items(self):
        for child in self.items_box.winfo_children():
            child.destroy()
        if not self.current or self.current.type != "checklist":
            return
        for i, item in enumerate(self.current.items):
            var = tk.BooleanVar(value=item.done)
            ttk.Checkbutton(self.items_box, text=item.text or "(vacío)", variable=var,
                            command=lambda i=i: self._on_item_toggle(i)).pack(anchor="w")
        entry = ttk.Entry(self.items_box)
        entry.pack(fill="x", pady=(4, 0))
        entry.bind("<Return>", lambda e: self._on_item_add(entry))

    def _on_item_toggle(self, index: int):
        self.controller.toggle_checklist_item(self.current, index)

    def _on_item_add(self, entry):
        text = entry.get().strip()
        if not text or not self.current:
            return
        self.current.items.append(ChecklistItem(text))
        self.controller.save_note(self.current)
        self._render_items()

    def _on_text_modified(self, _event=None):
        if self.text.edit_modified():
            self.text.edit_modified(False)
            self._schedule_save()

    def _schedule_save(self):
        if self._loading or not self.current:
            return
        if self._save_job is not None:
            self.after_cancel(self._save_job)
        self._save_job = self.after(NOTE_AUTOSAVE_MS, self._flush)

    def _flush(self):
        if self._save_job is not None:
            self.after_cancel(self._save_job)
            self._save_job = None
        if not self.current:
            return
        title = self.title_var.get()
        content = self.text.get("1.0", "end-1c")
        if title == self.current.title and content == self.current.content:
            return
        self.current.title = title
        self.current.content = content
        self.controller.save_note(self.current)
        self._render_list()

    def _on_new(self, note_type: str):
        self._flush()
        note = self.controller.create_note(note_type)
        if note is None:
            mb.showerror("Notas", "No se pudo crear la nota.", parent=self)
            return
        self.current = note
        self._render_list()
        self._load_editor()

    def _on_delete(self):
        if not self.current:
            return
        if mb.askyesno("Notas", "¿Eliminar la nota?", parent=self):
            if self._save_job is not None:
                self.after_cancel(self._save_job)
                self._save_job = None
            self.controller.delete_note(self.current.id)
            self.current = None
            self._render_list()
            self._load_editor()

    def destroy(self):
        self._flush()
        super().destroy()


class ForumTab(ttk.Frame):
    def __init__(self, parent, controller: AppController):
        super().__init__(parent, padding=12)
        self.controller = controller
        self.tag_filter = None

        form = ttk.LabelFrame(self, text="Nuevo post", padding=8)
        form.pack(fill="x")
        self.title_var = tk.StringVar()
        self.tags_var = tk.StringVar()
        ttk.Entry(form, textvariable=self.title_var).pack(fill="x")
        self.content = tk.Text(form, height=3, wrap="word")
        self.content.pack(fill="x", pady=4)
        bottom = ttk.Frame(form)
        bottom.pack(fill="x")
        ttk.Label(bottom, text="Etiquetas (separadas por coma):").pack(side="left")
        ttk.Entry(bottom, textvariable=self.tags_var).pack(side="left", fill="x", expand=True, padx=4)
        ttk.Button(bottom, text="Publicar", command=self._on_publish).pack(side="right")

        self.tags_bar = ttk.Frame(self)
        self.tags_bar.pack(fill="x", pady=6)

        self.tree = ttk.Treeview(self, columns=("author", "likes", "comments"), show="tree headings")
        self.tree.heading("#0", text="Título")
        self.tree.heading("author", text="Autor")
        self.tree.heading("likes", text="♥")
        self.tree.heading("comments", text="💬")
        self.tree.pack(fill="both", expand=True)
        self.tree.bind("<<TreeviewSelect>>", self._on_select)

        self.detail = tk.Text(self, height=6, wrap="word", state="disabled")
        self.detail.pack(fill="x", pady=(6, 0))
        actions = ttk.Frame(self)
        actions.pack(fill="x", pady=(4, 0))
        self.comment_var = tk.StringVar()
        ttk.Entry(actions, textvariable=self.comment_var).pack(side="left", fill="x", expand=True)
        ttk.Button(actions, text="Comentar", command=self._on_comment).pack(side="left", padx=4)
        ttk.Button(actions, text="Me gusta", command=self._on_like).pack(side="left")
        ttk.Button(actions, text="Eliminar", command=self._on_delete).pack(side="left", padx=(4, 0))

    def refresh(self):
        self.controller.load_posts()
        self._render()

    def _render(self):
        for child in self.tags_bar.winfo_children():
            child.destroy()
        ttk.Button(self.tags_bar, text="Todos", command=lambda: self._set_filter(None)).pack(side="left")
        for tag, count in tag_counts(self.controller.posts):
            ttk.Button(self.tags_bar, text=f"#{tag} ({count})",
                       command=lambda t=tag: self._set_filter(t)).pack(side="left", padx=2)

        self.tree.delete(*self.tree.get_children())
        for p in filter_by_tag(self.controller.posts, self.tag_filter):
            self.tree.insert("", "end", iid=p.id, text=p.title,
                             values=(p.author, len(p.likes), len(p.comments)))

    def _set_filter(self, tag):
        self.tag_filter = tag
        self._render()

    def _selected_id(self):
        sel = self.tree.selection()
        return sel[0] if sel else None

    def _on_select(self, _event=None):
        post = next((p for p in self.controller.posts if p.id == self._selected_id()), None)
        self.detail.configure(state="normal")
        self.detail.delete("1.0", "end")
        if post:
            lines = [post.content, ""]
            lines += [f"{c.author}: {c.content}" for c in post.comments]
            self.detail.insert("1.0", "\n".join(lines))
        self.detail.configure(state="disabled")

    def _on_publish(self):
        post = self.controller.create_post(self.title_var.get(), self.content.get("1.0", "end-1c"),
                                           self.tags_var.get())
        if post is None:
            mb.showwarning("Foro", "El post necesita título y contenido.", parent=self)
            return
        self.title_var.set("")
        self.tags_var.set("")
        self.content.delete("1.0", "end")
        self._render()

    def _on_like(self):
        pid = self._selected_id()
        if pid and self.controller.like_post(pid):
            self._render()
            self.tree.selection_set(pid)

    def _on_comment(self):
        pid = self._selected_id()
        if pid and self.controller.comment_post(pid, self.comment_var.get()):
            self.comment_var.set("")
            self._render()
            self.tree.selection_set(pid)

    def _on_delete(self):
        pid = self._selected_id()
        if not pid:
            return
        if not self.controller.delete_post(pid):
            mb.showinfo("Foro", "Solo podés eliminar tus propios posts.", parent=self)
            return
        self._render()


class ProfileTab(ttk.Frame):
    """Resultado SSR + ajustes de usuario."""
    def __init__(self, parent, controller: AppController, on_retake=None):
        super().__init__(parent, padding=12)
        self.controller = controller
        self._on_retake = on_retake
        self.body = ttk.Frame(self)
        self.body.pack(fill="both", expand=True)

        settings = ttk.LabelFrame(self, text="Ajustes", padding=8)
        settings.pack(fill="x", pady=(8, 0))
        self.notif_var = tk.BooleanVar()
        self.sound_var = tk.BooleanVar()
        self.avatar_var = tk.StringVar()
        ttk.Checkbutton(settings, text="Notificaciones", variable=self.notif_var).pack(side="left")
        ttk.Checkbutton(settings, text="Sonido", variable=self.sound_var).pack(side="left", padx=6)
        ttk.Label(settings, text="Avatar URL:").pack(side="left")
        ttk.Entry(settings, textvariable=self.avatar_var, width=40).pack(side="left", padx=4)
        ttk.Button(settings, text="Guardar", command=self._on_save_settings).pack(side="right")

    def refresh(self):
        for child in self.body.winfo_children():
            child.destroy()
        s = self.controller.settings
        self.notif_var.set(s.notifications)
        self.sound_var.set(s.sound_enabled)
        self.avatar_var.set(self.controller.avatar)

        profile = self.controller.data.profile
        ttk.Label(self.body, text=self.controller.username, font=("Segoe UI", 14, "bold")).pack(anchor="w")
        if profile is None or profile.analysis is None:
            ttk.Label(self.body, text="Todavía no completaste la encuesta SSR.").pack(anchor="w", pady=6)
        else:
            a = profile.analysis
            for label, result in (("Teléfono", a.phone), ("Sueño", a.sleep)):
                box = tk.LabelFrame(self.body, text=f"{label}: {result.title}", fg=result.color, padx=8, pady=4)
                box.pack(fill="x", pady=4)
                ttk.Label(box, text=result.description, wraplength=700).pack(anchor="w")
                for tip in result.advice:
                    ttk.Label(box, text=f"• {tip}").pack(anchor="w")
            ttk.Label(self.body, text=f"Método recomendado: {a.study_method.method_name}",
                      font=("Segoe UI", 11, "bold")).pack(anchor="w", pady=(6, 0))
            for phase in a.roadmap:
                ttk.Label(self.body, text=f"{phase.phase} · {phase.focus} ({phase.duration})").pack(anchor="w")
            if self.controller.ai.available:
                ttk.Button(self.body, text="Informe IA del uso del teléfono",
                           command=self._on_ai_report).pack(anchor="w", pady=(8, 0))
        if self._on_retake:
            ttk.Button(self.body, text="Repetir encuesta", command=self._on_retake).pack(anchor="w", pady=8)

    def _on_ai_report(self):
        report = self.controller.ai_usage_report()
        if not report:
            mb.showerror("Informe IA", "No se pudo generar el informe.", parent=self)
            return
        lines = [report.get("usage_level_label") or report.get("usage_level", ""),
                 report.get("usage_summary", ""), ""]
        lines += [f"• {tip}" for tip in report.get("advice_list") or []]
        mb.showinfo("Informe IA", "\n".join(lines), parent=self)

    def _on_save_settings(self):
        ok = self.controller.update_settings(self.notif_var.get(), self.sound_var.get(),
                                             avatar=self.avatar_var.get().strip() or None)
        if not ok:
            mb.showerror("Ajustes", "No se pudieron guardar los ajustes.", parent=self)


class TutorTab(ttk.Frame):
    def __init__(self, parent, controller: AppController):
        super().__init__(parent, padding=12)
        self.controller = controller
        self.subject_var = tk.StringVar()
        form = ttk.Frame(self)
        form.pack(fill="x")
        ttk.Label(form, text="Materia:").pack(side="left")
        ttk.Entry(form, textvariable=self.subject_var, width=24).pack(side="left", padx=4)
        ttk.Label(form, text="¿Qué te cuesta?").pack(side="left")
        self.problem_var = tk.StringVar()
        ttk.Entry(form, textvariable=self.problem_var).pack(side="left", fill="x", expand=True, padx=4)
        self.ask_btn = ttk.Button(form, text="Pedir plan", command=self._on_ask)
        self.ask_btn.pack(side="left")

        self.output = tk.Text(self, wrap="word", state="disabled")
        self.output.pack(fill="both", expand=True, pady=(8, 0))

    def refresh(self):
        if not self.controller.ai.available:
            self._show("Configurá GEMINI_API_KEY para usar el tutor.")

    def _on_ask(self):
        self.ask_btn.configure(state="disabled")
        self.update_idletasks()
        try:
            plan = self.controller.remediation_plan(self.subject_var.get(), self.problem_var.get())
        finally:
            self.ask_btn.configure(state="normal")
        if plan is None:
            self._show("No se pudo generar el plan. Revisá la materia y el problema.")
            return
        lines = [plan.topic, "", plan.explanation, ""]
        for s in plan.steps:
            lines.append(f"{s.step}. {s.action}" + (f" ({s.resource})" if s.resource else ""))
        if plan.quiz_question:
            lines += ["", f"Pregunta: {plan.quiz_question}"]
        self._show("\n".join(lines))

    def _show(self, text: str):
        self.output.configure(state="normal")
        self.output.delete("1.0", "end")
        self.output.insert("1.0", text)
        self.output.configure(state="disabled")


class FeedbackTab(ttk.Frame):
    LABELS = {"feature": "Idea", "bug": "Error", "other": "Otro"}

    def __init__(self, parent, controller: AppController):
        super().__init__(parent, padding=12)
        self.controller = controller
        form = ttk.Frame(self)
        form.pack(fill="x")
        self.type_var = tk.StringVar(value=FEEDBACK_TYPES[0])
        for t in FEEDBACK_TYPES:
            ttk.Radiobutton(form, text=self.LABELS[t], value=t, variable=self.type_var).pack(side="left")
        ttk.Button(form, text="Enviar", command=self._on_send).pack(side="right")
        self.content = tk.Text(self, height=4, wrap="word")
        self.content.pack(fill="x", pady=6)

        self.tree = ttk.Treeview(self, columns=("type", "content"), show="tree headings")
        self.tree.heading("#0", text="Autor")
        self.tree.heading("type", text="Tipo")
        self.tree.heading("content", text="Comentario")
        self.tree.pack(fill="both", expand=True)

    def refresh(self):
        self.tree.delete(*self.tree.get_children())
        for fb in self.controller.load_feedback():
            self.tree.insert("", "end", text=fb.author, values=(self.LABELS[fb.type], fb.content))

    def _on_send(self):
        if self.controller.submit_feedback(self.type_var.get(), self.content.get("1.0", "end-1c")):
            self.content.delete("1.0", "end")
            self.refresh()
        else:
            mb.showwarning("Feedback", "No se pudo enviar el comentario.", parent=self)


class CommunityTab(ttk.Frame):
    def __init__(self, parent, controller: AppController):
        super().__init__(parent, padding=12)
        self.controller = controller
        self.trends_var = tk.StringVar()
        ttk.Label(self, textvariable=self.trends_var, justify="left").pack(anchor="w")

        search = ttk.Frame(self)
        search.pack(fill="x", pady=(10, 4))
        ttk.Label(search, text="Buscar usuario:").pack(side="left")
        self.term_var = tk.StringVar()
        entry = ttk.Entry(search, textvariable=self.term_var)
        entry.pack(side="left", fill="x", expand=True, padx=4)
        entry.bind("<Return>", lambda e: self._render_users())

        self.tree = ttk.Treeview(self, columns=("tasks", "completed", "ssr"), show="tree headings")
        self.tree.heading("#0", text="Usuario")
        self.tree.heading("tasks", text="Tareas")
        self.tree.heading("completed", text="Completadas")
        self.tree.heading("ssr", text="SSR")
        self.tree.pack(fill="both", expand=True)

    def refresh(self):
        t = self.controller.community_trends()
        counts = ", ".join(f"{CATEGORY_LABELS.get(c, c)}: {n}" for c, n in t.category_counts.items())
        self.trends_var.set(
            f"{t.total_users} usuarios · {t.total_tasks} tareas · {t.completion_rate}% completadas\n"
            f"Promedio: {t.avg_tasks_per_user} tareas y {t.avg_study_hours_per_user} h por usuario\n"
            f"{counts}"
        )
        self._render_users()

    def _render_users(self):
        self.tree.delete(*self.tree.get_children())
        for u in self.controller.user_directory(self.term_var.get()):
            self.tree.insert("", "end", text=u["username"],
                             values=(u["tasks"], u["completed"], "✓" if u["has_profile"] else ""))
