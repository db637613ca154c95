import os

from loguru import logger

from bizdir.core.config import settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}"


def _is_startup(record) -> bool:
    return record["extra"].get("startup", False)


# (file under LOG_DIR, minimum level, record filter)
_SINKS = (
    ("app.log", settings.LOG_LEVEL, None),
    # store failures, provider failures and rejected requests
    ("errors.log", "WARNING", None),
    (os.path.join("startup", "startup.log"), "INFO", _is_startup),
)

_configured = False


def configure_logging(log_dir: str = settings.LOG_DIR):
    global _configured
    if _configured:
        return
    for filename, level, record_filter in _SINKS:
        path = os.path.join(log_dir, filename)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        logger.add(
            path,
            rotation="10 MB",
            level=level,
            enqueue=True,
            backtrace=True,
            diagnose=False,
            format=LOG_FORMAT,
            filter=record_filter,
        )
    _configured = True


configure_logging()


def get_logger():
    return logger


def get_startup_logger():
    """Logger whose records also land in ``startup/startup.log``."""
    return logger.bind(startup=True)
