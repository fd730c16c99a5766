from __future__ import annotations

# Standard library imports
import os
from typing import Dict, List, Optional

# ----------------------------------------------------------------------------------
# ENVIRONMENT HELPERS
# ----------------------------------------------------------------------------------

def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(val: str | None, default: int) -> int:
    try:
        return int(val) if val is not None and str(val).strip() != "" else default
    except ValueError:
        return default


def _as_str(val: str | None) -> Optional[str]:
    if val is None:
        return None
    text = val.strip()
    return text or None


# ----------------------------------------------------------------------------------
# GENERATOR BACKEND
# ----------------------------------------------------------------------------------
# Exactly one backend is used. KINGDOM_GENERATOR ("package.module:attribute")
# takes precedence over GENERATOR_URL (base URL of a generator HTTP service).

def generator_target() -> Optional[str]:
    """Import path of an in-process generator object, if configured."""
    return _as_str(os.getenv("KINGDOM_GENERATOR"))


def generator_url() -> Optional[str]:
    """Base URL of a remote generator service, if configured."""
    return _as_str(os.getenv("GENERATOR_URL"))


def generator_timeout_s() -> int:
    return _as_int(os.getenv("GENERATOR_TIMEOUT_S"), 10)


GENERATOR_ENDPOINTS: Dict[str, str] = {
    'catalogue': '/catalogue',
    'project_counts': '/project-counts',
    'bane_counts': '/bane-counts',
    'generate': '/generate',
}

# ----------------------------------------------------------------------------------
# WEB UI
# ----------------------------------------------------------------------------------
APP_VERSION: str = os.getenv("APP_VERSION", "dev")
SHOW_DIAGNOSTICS: bool = _as_bool(os.getenv("SHOW_DIAGNOSTICS"), False)
SESSION_TTL_SECONDS: int = _as_int(os.getenv("SESSION_TTL_SECONDS"), 60 * 60 * 8)

# Radio value meaning "let the Generator choose"
RANDOM_CHOICE: str = 'random'

# Tree captions, keyed by tree purpose
TREE_TITLES: Dict[str, str] = {
    'includes': 'Include cards',
    'bans': 'Ban cards',
    'expansions': 'Expansions',
}

# ----------------------------------------------------------------------------------
# TEXT OUTPUT
# ----------------------------------------------------------------------------------
BANNER_WIDTH: int = 51
KINGDOM_HEADING: str = 'Kingdom Cards'
PROJECT_HEADING: str = 'Project Cards'
OUTPUT_FORMATS: List[str] = ['pretty', 'raw', 'json', 'code']

# Title used in the play-log record when no name was generated
DEFAULT_GAME_NAME: str = 'Game'

# ----------------------------------------------------------------------------------
# LOGGING
# ----------------------------------------------------------------------------------
LOG_DIR: str = os.getenv('LOG_DIR', 'logs')
LOG_LEVEL: str = (os.getenv('LOG_LEVEL') or 'INFO').strip().upper()
