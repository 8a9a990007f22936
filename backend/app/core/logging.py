from __future__ import annotations

import logging
import logging.handlers

from app.core.config import BACKEND_DIR, Settings


def setup_logging(settings: Settings) -> None:
    """Configure root logging once per process.

    Development logs to the console at DEBUG. Production adds a rotating
    file under ``backend/logs`` and logs at INFO. ``log_level`` overrides both.
    """

    root = logging.getLogger()
    if root.handlers:
        return

    env = (settings.environment or "development").lower().strip()
    default_level = "INFO" if env == "production" else "DEBUG"
    level = logging.getLevelName((settings.log_level or default_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    if env == "production":
        logs_dir = BACKEND_DIR / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / "campusgrid.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
