"""
Payment Intent Server - Logging
Root logger configuration shared by the API process
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level_name: str = "INFO") -> None:
    """Configure root logger for console output."""
    level = getattr(logging, level_name.strip().upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # The processor client logs request lines at INFO; keep them out of our output
    logging.getLogger("stripe").setLevel(max(level, logging.WARNING))
