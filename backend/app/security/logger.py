import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.core.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _build_logger(name: str, filename: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    # Prevent duplicate handlers on re-import
    if not logger.handlers:
        log_dir = Path(get_settings().log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        # max 5 MB per file, keep 3 backups
        handler = RotatingFileHandler(log_dir / filename, maxBytes=5 * 1024 * 1024, backupCount=3)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


auth_logger = _build_logger("auth", "auth.log")
vote_logger = _build_logger("vote", "vote.log")
eskul_logger = _build_logger("eskul", "eskul.log")
