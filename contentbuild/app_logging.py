from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from contentbuild.config import APP_NAME, APP_VERSION, ENV_LOG_LEVEL, ENV_LOG_TO_CONSOLE, LOGS_DIRNAME

_LOG = logging.getLogger("contentbuild")

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_log_path: Optional[Path] = None
_initialised = False


def _level_from_env() -> int:
    name = str(os.environ.get(ENV_LOG_LEVEL, "INFO") or "INFO").upper().strip()
    level = getattr(logging, name, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def init_app_logging(component: str = "app", logs_dir: Optional[str] = None) -> Optional[Path]:
    """Initialise a per-run log file under ./logs (or ``logs_dir``).

    Attaches a FileHandler to the ``contentbuild`` logger and, when
    CONTENTBUILD_LOG_TO_CONSOLE is set, a stderr handler too. Calling it
    again returns the file from the first call.

    Returns the log file path, or None when the file could not be created.
    """
    global _log_path, _initialised
    if _initialised:
        return _log_path
    _initialised = True

    level = _level_from_env()
    _LOG.setLevel(level)

    to_console = str(os.environ.get(ENV_LOG_TO_CONSOLE, "") or "").strip().lower()
    if to_console in ("1", "true", "yes", "on"):
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level)
        sh.setFormatter(logging.Formatter(_FORMAT))
        _LOG.addHandler(sh)

    try:
        folder = Path(logs_dir) if logs_dir else Path.cwd() / LOGS_DIRNAME
        folder.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        path = folder / f"{component}_{ts}.log"
        fh = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        _LOG.warning("File logging disabled: %s", e)
        return None

    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(_FORMAT))
    _LOG.addHandler(fh)

    _LOG.info("=== %s %s (%s) ===", APP_NAME, APP_VERSION, component)
    _LOG.info("python=%s", sys.version.replace("\n", " "))

    _log_path = path
    return path


def current_log_path() -> Optional[Path]:
    return _log_path
