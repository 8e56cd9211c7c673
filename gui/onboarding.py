import tkinter as tk
from tkinter import ttk, messagebox as mb

from controller.app_controller import AppController
from core.models import PhoneUsageSurvey, SleepSurvey
from services import ssr_classifier as ssr

PHONE_QUESTIONS = [
    ("daily_hours", "¿Cuántas horas por día usás el teléfono?", ssr.DAILY_HOURS_OPTIONS),
    ("peak_time", "¿En qué momento lo usás más?", ssr.PEAK_TIME_OPTIONS),
    ("usage_during_study", "¿Lo usás mientras estudiás?", ssr.FREQUENCY_OPTIONS),
    ("overuse_intention", "¿Lo usás más de lo que querías?", ssr.FREQUENCY_OPTIONS),
    ("has_limits", "¿Te ponés límites de uso?", ssr.LIMITS_OPTIONS),
    ("impact", "¿Afecta tu estudio o tu sueño?", ssr.PHONE_IMPACT_OPTIONS),
]

SLEEP_QUESTIONS = [
    ("sleep_duration", "¿Cuántas horas dormís por noche?", ssr.SLEEP_DURATION_OPTIONS),
    ("bed_time", "¿A qué hora te acostás?", ssr.BED_TIME_OPTIONS),
    ("fall_asleep_time", "¿Cuánto tardás en dormirte?", ssr.FALL_ASLEEP_OPTIONS),
    ("sleep_quality", "¿Cómo es la calidad de tu sueño?", ssr.SLEEP_QUALITY_OPTIONS),
    ("pre_sleep_device", "¿Usás pantallas antes de dormir?", ssr.PRE_SLEEP_DEVICE_OPTIONS),
    ("wake_up_state", "¿Cómo te sentís al despertar?", ssr.WAKE_UP_OPTIONS),
    ("impact", "¿El sueño afecta tu estudio?", ssr.SLEEP_IMPACT_OPTIONS),
]


class OnboardingDialog(tk.Toplevel):
    """Encuesta SSR (teléfono + sueño). Al terminar llama ``on_done(profile)``."""
    def __init__(self, master, controller: AppController, on_done=None):
        super().__init__(master)
        self.controller = controller
        self._on_done = on_done
        self.title("SSR · Encuesta inicial")
        self.transient(master)
        self.resizable(False, False)
        self.protocol("WM_DELETE_WINDOW", self._on_skip)

        nb = ttk.Notebook(self)
        nb.pack(fill="both", expand=True, padx=10, pady=10)

        phone_tab = ttk.Frame(nb, padding=10)
        nb.add(phone_tab, text="Teléfono")
        self.phone_vars = self._build_questions(phone_tab, PHONE_QUESTIONS)
        ttk.Label(phone_tab, text="¿Para qué lo usás? (podés marcar varias)").grid(
            row=len(PHONE_QUESTIONS), column=0, sticky="nw", pady=4)
        purposes_box = ttk.Frame(phone_tab)
        purposes_box.grid(row=len(PHONE_QUESTIONS), column=1, sticky="w", pady=4)
        self.purpose_vars = {}
        for p in ssr.PURPOSE_OPTIONS:
            var = tk.BooleanVar(value=False)
            ttk.Checkbutton(purposes_box, text=p, variable=var).pack(anchor="w")
            self.purpose_vars[p] = var

        sleep_tab = ttk.Frame(nb, padding=10)
        nb.add(sleep_tab, text="Sueño")
        self.sleep_vars = self._build_questions(sleep_tab, SLEEP_QUESTIONS)

        btns = ttk.Frame(self)
        btns.pack(fill="x", padx=10, pady=(0, 10))
        ttk.Button(btns, text="Saltear (modo prueba)", command=self._on_skip).pack(side="left")
        self.finish_btn = ttk.Button(btns, text="Finalizar", command=self._on_finish)
        self.finish_btn.pack(side="right")

        self.wait_visibility()
        self.grab_set()

    @staticmethod
    def _build_questions(parent, questions):
        values = {}
        for row, (key, text, options) in enumerate(questions):
            ttk.Label(parent, text=text).grid(row=row, column=0, sticky="w", pady=4, padx=(0, 8))
            var = tk.StringVar()
            ttk.Combobox(parent, textvariable=var, values=options, state="readonly", width=40).grid(
                row=row, column=1, sticky="w", pady=4)
            values[key] = var
        return values

    def _surveys(self):
        phone = PhoneUsageSurvey(
            purposes=[p for p, var in self.purpose_vars.items() if var.get()],
            **{k: v.get() for k, v in self.phone_vars.items()},
        )
        sleep = SleepSurvey(**{k: v.get() for k, v in self.sleep_vars.items()})
        return phone, sleep

    def _on_finish(self):
        phone, sleep = self._surveys()
        if not (phone.is_complete() and sleep.is_complete()):
            mb.showwarning("Encuesta", "Respondé todas las preguntas para continuar.", parent=self)
            return
        self.finish_btn.configure(state="disabled", text="Generando agenda…")
        self.update_idletasks()
        profile = self.controller.complete_survey(phone, sleep)
        self._close(profile)

    def _on_skip(self):
        self._close(self.controller.skip_survey())

    def _close(self, profile):
        self.grab_release()
        self.destroy()
        if self._on_done:
            self._on_done(profile)
