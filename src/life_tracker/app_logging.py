"""Logging configuration helpers."""

import logging

_APP_LOGGER = "life_tracker"
# Client libraries that log every outbound request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: str | int = "INFO") -> None:
    """Route pipeline logs to one stream handler at the configured level.

    Repeated calls only adjust the level. Outbound HTTP client loggers are
    held at WARNING so nutrition and model calls do not log each request.
    """
    logger = logging.getLogger(_APP_LOGGER)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
