from loguru import logger

from core.config import BASE_URL, GEMINI_API_KEY, GEMINI_MODEL, IDENTITY, LOG_LEVEL, PASSWORD
from core.exceptions import PBError
from core.log import configure_logging
from storage.pocketbase import PocketBaseClient
from services.gemini_service import GeminiService
from controller.app_controller import AppController
from gui.main_window import MainWindow


def main():
    configure_logging(LOG_LEVEL)
    client = PocketBaseClient(BASE_URL)
    try:
        client.login(IDENTITY, PASSWORD)
    except PBError as e:
        # Evitamos tkinter si no tenemos token
        logger.error(f"Login error: {e}")
        return

    if not GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set; schedule generation and tutor are disabled")
    controller = AppController(client, GeminiService(GEMINI_API_KEY, GEMINI_MODEL))
    ui = MainWindow(controller)
    if controller.needs_onboarding():
        ui.after(200, ui.show_onboarding)
    ui.mainloop()


if __name__ == "__main__":
    main()
