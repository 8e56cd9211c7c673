class SmartStudyError(Exception):
    pass


class PBError(SmartStudyError):
    """Fallo del backend PocketBase (auth o colecciones)."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class AIError(SmartStudyError):
    pass
