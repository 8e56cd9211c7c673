import sys

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    """Reemplaza el sink por defecto de loguru por uno en stderr con el nivel dado."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )
