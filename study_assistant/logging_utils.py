from __future__ import annotations

import logging
import os
import sys
import traceback
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "study_assistant"
_LOG_NAME = "app.log"


def log_file_path(log_dir: str) -> str:
    return os.path.join(log_dir, _LOG_NAME)


def configure_logging(level: str | int = logging.INFO, log_dir: str | None = None) -> logging.Logger:
    """Attach a rotating file handler and a console handler to the app logger.

    Calling this more than once does not add duplicate handlers. When the log
    directory cannot be created only the console handler is installed.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if log_dir and not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        try:
            os.makedirs(log_dir, exist_ok=True)
            fhandler = RotatingFileHandler(
                log_file_path(log_dir),
                maxBytes=512_000,
                backupCount=3,
                encoding="utf-8",
            )
        except OSError as exc:
            print(f"File logging disabled: {exc}", file=sys.stderr)
        else:
            fhandler.setLevel(logging.DEBUG)
            fhandler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
            logger.addHandler(fhandler)

    # RotatingFileHandler is itself a StreamHandler subclass.
    has_console = any(
        type(h) is logging.StreamHandler for h in logger.handlers
    )
    if not has_console:
        ch = logging.StreamHandler()
        ch.setLevel(level)
        ch.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(ch)

    logger.debug("Logging initialized (level=%s, dir=%s)", logging.getLevelName(logger.level), log_dir)
    return logger


def install_excepthook(logger: logging.Logger | None = None) -> None:
    """Route uncaught exceptions through the app logger before the default hook."""
    lg = logger or logging.getLogger(LOGGER_NAME)

    def _hook(exc_type, exc, tb):
        lg.error("Uncaught exception:\n%s", "".join(traceback.format_exception(exc_type, exc, tb)).rstrip())
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _hook
