"""
Environment Helpers
===================

- Locate the project root and load its .env (python-dotenv)
- Read typed PRICECAST_* overrides, failing loudly on malformed values

Usage:
    from pricecast.utils.env import load_repo_dotenv, get_env_int

    load_repo_dotenv()
    window = get_env_int("PRICECAST_WINDOW_SIZE", 60)
"""

import os
import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Any of these marks a project root
ROOT_MARKERS = (".git", "pyproject.toml", "requirements.txt")
MAX_SEARCH_DEPTH = 10


def _find_root_from(start: Path) -> Optional[Path]:
    for candidate in [start, *start.parents][:MAX_SEARCH_DEPTH]:
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    return None


def get_repo_root() -> Path:
    """
    Project root: nearest ancestor holding a ROOT_MARKERS entry.

    The package location is searched first, then the working directory.
    Falls back to the working directory when neither search succeeds.
    """
    cwd = Path.cwd()
    for start in (Path(__file__).resolve().parent, cwd):
        root = _find_root_from(start)
        if root is not None:
            return root
    return cwd


def load_repo_dotenv(dotenv_path: Optional[Path] = None) -> bool:
    """
    Load a .env file into os.environ without overriding existing variables.

    Args:
        dotenv_path: Explicit file (default: <repo root>/.env)

    Returns:
        True if a file was found and loaded
    """
    path = Path(dotenv_path) if dotenv_path is not None else get_repo_root() / ".env"
    if not path.is_file():
        logger.debug(f"No .env at {path}")
        return False

    loaded = load_dotenv(path, override=False)
    logger.debug(f"Loaded .env from {path}: {loaded}")
    return loaded


def _get_env(name: str, default: T, cast: Callable[[str], T], kind: str) -> T:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be {kind}, got {raw!r}")


def get_env_int(name: str, default: int) -> int:
    """Integer override; unset or blank yields default."""
    return _get_env(name, default, int, "an integer")


def get_env_float(name: str, default: float) -> float:
    """Float override; unset or blank yields default."""
    return _get_env(name, default, float, "a number")


def get_env_optional_int(name: str, default: Optional[int] = None) -> Optional[int]:
    """Integer override whose default may be None (e.g. an unset seed)."""
    return _get_env(name, default, int, "an integer")
