import os

# PocketBase (documentos + auth)
BASE_URL = os.getenv("SMARTSTUDY_PB_URL", "http://127.0.0.1:8090")
IDENTITY = os.getenv("SMARTSTUDY_IDENTITY", "")
PASSWORD = os.getenv("SMARTSTUDY_PASSWORD", "")
HTTP_TIMEOUT = float(os.getenv("SMARTSTUDY_HTTP_TIMEOUT", "10"))

# admin, solo para pb_bootstrap.py
ADMIN_EMAIL = os.getenv("SMARTSTUDY_PB_ADMIN_EMAIL", "")
ADMIN_PASSWORD = os.getenv("SMARTSTUDY_PB_ADMIN_PASSWORD", "")

# Gemini
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("SMARTSTUDY_GEMINI_MODEL", "gemini-1.5-flash")

# UI
WINDOW_GEOMETRY = os.getenv("SMARTSTUDY_WINDOW_GEOMETRY", "980x680")
TOPMOST = os.getenv("SMARTSTUDY_TOPMOST", "0") == "1"
SYNC_INTERVAL_MS = 60_000      # pomodoro <-> agenda
TICK_INTERVAL_MS = 1_000       # cuenta regresiva
NOTE_AUTOSAVE_MS = 1_000

LOG_LEVEL = os.getenv("SMARTSTUDY_LOG_LEVEL", "INFO")
