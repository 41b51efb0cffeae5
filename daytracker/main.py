from pathlib import Path

import uvicorn
from dotenv import find_dotenv, load_dotenv
from loguru import logger

from daytracker.logging_setup import setup_logging


def _load_env() -> str | None:
    """Load `.env` from the working tree, else from the project root. Real env vars win."""
    found = find_dotenv(usecwd=True) or None
    project_env = Path(__file__).resolve().parents[1] / ".env"
    if found is None and project_env.is_file():
        found = str(project_env)
    if found is not None:
        load_dotenv(found, override=False)
    return found


def main() -> None:
    env_path = _load_env()
    setup_logging()
    logger.info("env file={}", env_path or "<none>")

    # settings are read after .env is loaded
    from daytracker.config import settings

    if not settings.remote_enabled:
        logger.info("Supabase not configured, serving demo data from {}", settings.sqlite_path)
    uvicorn.run("daytracker.api.app:app", host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    main()
