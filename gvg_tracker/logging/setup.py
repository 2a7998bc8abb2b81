import sys
import logging
from typing import Any, Optional

from loguru import logger

from gvg_tracker.config.settings import settings

SENSITIVE_KEYS = ["key", "token", "password", "secret", "cookie"]

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def _mask(value: Any) -> Any:
    if isinstance(value, str):
        if len(value) > 8:
            return value[:4] + "****" + value[-4:]
        return "********"
    return "********"


def sensitive_data_filter(record: dict[str, Any]) -> bool:
    """Filter function to mask sensitive values bound into log records."""
    extra = record.get("extra")
    if isinstance(extra, dict):
        for extra_key in list(extra):
            if any(sk in extra_key.lower() for sk in SENSITIVE_KEYS):
                extra[extra_key] = _mask(extra[extra_key])
    return True  # Keep the record after filtering/masking


class InterceptHandler(logging.Handler):
    """Routes standard logging records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    level: Optional[str] = None, log_file: Optional[str] = None
) -> None:
    """Configures Loguru logger based on application settings."""
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()  # Remove default handler

    # Basic console logging
    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=True,
        filter=sensitive_data_filter,
    )

    if log_file:
        logger.add(
            log_file,
            level="DEBUG",  # Log everything to file
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            filter=sensitive_data_filter,
        )

    logger.info(f"Logging initialized with level: {level}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.debug("Standard logging intercepted.")
