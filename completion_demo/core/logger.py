import sys
from typing import Optional
from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss:SSS}</green> | sid={extra[session_id]} | <level>{level: <8}</level> | <cyan>{extra[object_name]}</cyan> - <level>{message}</level>"
FILE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss:SSS}</green> | sid={extra[session_id]} | <level>{level: <8}</level> | <cyan>{extra[object_name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"


def _ensure_extra_fields(record):
    # Always provide defaults so unbound loggers still format
    record["extra"].setdefault("session_id", "-")
    record["extra"].setdefault("object_name", "UNKNOWN")
    return True


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    (Re)install the loguru sinks.

    The console sink writes to stderr, stdout carries the demo's result lines.
    A rotating file sink is added when ``log_file`` is given.
    """
    logger.remove()
    logger.add(
        lambda msg: print(msg, end="", file=sys.stderr),
        level=level,
        format=CONSOLE_FORMAT,
        colorize=True,
        filter=_ensure_extra_fields,
    )
    if log_file:
        logger.add(
            log_file,
            rotation="10 MB",
            retention="7 days",
            level=level,
            format=FILE_FORMAT,
            backtrace=True,
            diagnose=True,
            filter=_ensure_extra_fields,
        )


configure_logging()

__all__ = ["logger", "configure_logging"]
