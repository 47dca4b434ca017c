import sys
from loguru import logger
from docfetch.core.config import settings

def configure_logging(level: str = None):
    """Replace loguru's default sink with a single stderr sink"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}",
    )
