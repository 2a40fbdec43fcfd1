"""
Shared Utility Functions
========================

Environment helpers used by configuration. Price series validation lives
in pricecast.utils.price_validation and is imported from there directly.
"""

from pricecast.utils.env import (
    load_repo_dotenv,
    get_repo_root,
    get_env_int,
    get_env_float,
    get_env_optional_int,
)

__all__ = [
    "load_repo_dotenv",
    "get_repo_root",
    "get_env_int",
    "get_env_float",
    "get_env_optional_int",
]
