from __future__ import annotations

import logging
import os
from typing import Optional


DEBUG_PY_TRACE_ENV = "CONDEXPR_DEBUG_PY_TRACE"
LOG_LEVEL_ENV = "CONDEXPR_LOG_LEVEL"

_TRUTHY_FLAGS = ("1", "true", "yes", "on")

def debug_py_trace_enabled() -> bool:
    """Python tracebacks are shown for CLI/REPL failures when set."""
    return os.environ.get(DEBUG_PY_TRACE_ENV, "").strip().lower() in _TRUTHY_FLAGS

def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        os.environ.pop(DEBUG_PY_TRACE_ENV, None)

def log_level_from_env(default: int = logging.WARNING) -> int:
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip()
    if not raw:
        return default

    if raw.isdigit():
        return int(raw)

    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default

def configure_logging(level: Optional[int] = None) -> None:
    """Root handler for the command-line entry points; library code never calls this."""
    logging.basicConfig(
        level=level if level is not None else log_level_from_env(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
