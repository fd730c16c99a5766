from __future__ import annotations

import os
import logging

from kingdom_gen import settings

# Logging configuration (directory and level come from the environment via settings)
LOG_DIR = settings.LOG_DIR
LOG_FILE = os.path.join(LOG_DIR, 'kingdom_gen.log')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_level(name: str | None) -> int:
    """Map a level name such as ``DEBUG`` to its logging constant; unknown names give INFO."""
    level = logging.getLevelName((name or '').strip().upper())
    return level if isinstance(level, int) else logging.INFO


LOG_LEVEL = resolve_level(settings.LOG_LEVEL)

os.makedirs(LOG_DIR, exist_ok=True)


# Logger names are module paths; drop the dunders of package-level loggers
class NoDunderFormatter(logging.Formatter):
    def format(self, record):
        record.name = record.name.replace("__", "")
        return super().format(record)


# Shared handlers: one log file per process plus the console
file_handler = logging.FileHandler(LOG_FILE, mode='a', encoding='utf-8')
file_handler.setFormatter(NoDunderFormatter(LOG_FORMAT))

stream_handler = logging.StreamHandler()
stream_handler.setFormatter(NoDunderFormatter(LOG_FORMAT))


def get_logger(name: str = 'kingdom_gen') -> logging.Logger:
    """Logger wired to the shared handlers; calling it again for a name adds nothing."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(LOG_LEVEL)
        logger.addHandler(file_handler)
        logger.addHandler(stream_handler)
    return logger
