"""
Central configuration for aitools.
Loads environment variables from a .env file at import time.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Union

from dotenv import load_dotenv

# --- Load .env early so everything importing config sees the vars ---
# This looks for a .env in the current working dir or parents.
load_dotenv()

#: Environment variable names
GROQ_API_KEY_ENV = "GROQ_API_KEY"
GROQ_MODEL_ENV = "GROQ_MODEL"
LOG_LEVEL_ENV = "AITOOLS_LOG_LEVEL"
MAX_STEPS_ENV = "AITOOLS_MAX_STEPS"

#: Defaults used when the matching variable is unset.
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_STEPS = 5

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def require_env(var_name: str) -> str:
    """
    Return the value of an environment variable or raise a clear error.

    Raises
    ------
    RuntimeError
        If the environment variable is missing or empty.
    """
    try:
        value = os.environ[var_name]
    except KeyError as exc:
        raise RuntimeError(f"Required environment variable '{var_name}' is not set.") from exc
    if not value:
        raise RuntimeError(f"Environment variable '{var_name}' is empty.")
    return value


def get_groq_api_key() -> str:
    """
    Convenience accessor specifically for the Groq API key.
    """
    return require_env(GROQ_API_KEY_ENV)


def get_max_steps(default: int = DEFAULT_MAX_STEPS) -> int:
    """Agent step budget from the environment, falling back to ``default``."""
    raw = os.environ.get(MAX_STEPS_ENV)
    if not raw:
        return default
    try:
        steps = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable '{MAX_STEPS_ENV}' must be an integer, got {raw!r}.") from exc
    if steps < 1:
        raise RuntimeError(f"Environment variable '{MAX_STEPS_ENV}' must be positive, got {steps}.")
    return steps


def configure_logging(level: Optional[Union[int, str]] = None) -> int:
    """
    Configure root logging for applications embedding aitools.

    The library itself never installs handlers; call this from your entry point.

    Returns
    -------
    int
        The numeric level that was applied.
    """
    resolved = level if level is not None else os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
    if isinstance(resolved, str):
        numeric = logging.getLevelName(resolved.upper())
        if not isinstance(numeric, int):
            raise RuntimeError(f"Unknown log level {resolved!r}.")
    else:
        numeric = resolved
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger("aitools").setLevel(numeric)
    return numeric
