"""Logging setup shared by every module — stdlib only."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_DEFAULT_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output during browser runs
_NOISY = ("asyncio", "urllib3", "playwright")

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; installs root handlers on first call."""
    if not _configured:
        configure()
    return logging.getLogger(name)


def configure(level: str | None = None) -> None:
    """(Re)configure the root logger.

    ``level`` overrides ``LOG_LEVEL``. Handlers are only added once; later calls
    just adjust the level (the CLI uses this for ``--verbose``).
    """
    global _configured
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(resolved)
    for name in _NOISY:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))

    if _configured or root.handlers:
        for h in root.handlers:
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
                h.setLevel(resolved)
        _configured = True
        return
    _configured = True

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(resolved)
    console.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    root.addHandler(console)

    log_dir = Path(os.environ.get("AUTOAPPLY_LOG_DIR", "") or _DEFAULT_LOG_DIR)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"autoapply_{datetime.now().strftime('%Y-%m-%d')}.log"
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
        root.addHandler(fh)
    except OSError:
        pass
