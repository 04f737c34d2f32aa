import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from app.core.config import get_log_level


def setup_logging():
    """
    Configures JSON logging on stdout for the whole process.
    Safe to call more than once: existing root handlers are replaced.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(get_log_level())

    # Prevent duplicate logs by removing existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_handler = logging.StreamHandler(sys.stdout)
    formatter = JsonFormatter(
        fmt='%(asctime)s %(levelname)s %(name)s %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%SZ'
    )
    log_handler.setFormatter(formatter)
    root_logger.addHandler(log_handler)

    # Request lines and SQL echo are noise at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)

    root_logger.info("Logging initialized", extra={"level": get_log_level()})
