"""Run the user service.

    python -m backend.user_service

Environment variables are read after loading a ``.env`` file from the
working directory, if one exists. SUPABASE_URL and SUPABASE_API_KEY are
required; startup aborts without them.
"""
from __future__ import annotations

import logging
import sys

import uvicorn
from dotenv import load_dotenv

from .config import get_settings
from .logging_config import configure_logging
from .main import create_app

logger = logging.getLogger("backend.user_service")


def main() -> int:
    load_dotenv()

    try:
        settings = get_settings()
    except RuntimeError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 1

    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    logger.info("configuration_loaded", extra={"env": settings.env})

    app = create_app(settings)
    logger.info("server_starting", extra={"host": settings.HOST, "port": settings.PORT})
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
