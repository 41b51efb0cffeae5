import sys
from pathlib import Path

from loguru import logger


def setup_logging(level: str = "INFO") -> None:
    from daytracker.config import settings

    log_file = Path(settings.log_path)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(sys.stdout, level=level)
    logger.add(log_file, rotation="10 MB", level=level)
    logger.info(
        "logging ready tz={} mode={}",
        settings.timezone,
        "remote" if settings.remote_enabled else "demo",
    )
