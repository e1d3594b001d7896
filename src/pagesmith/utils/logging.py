import logging
from typing import Any


_default_root_logger = logging.getLogger()

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def create_stream_logging_handler(
    log_level: int,
    root_logger: logging.Logger = _default_root_logger,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> logging.StreamHandler[Any]:
    """
    Sets up logging with a single handler which emits logs to stderr. Calling this twice
    with the same root logger replaces the previously installed handler.
    """
    for handler in list(root_logger.handlers):
        if getattr(handler, "_pagesmith_handler", False):
            root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(logging.Formatter(fmt))
    setattr(stream_handler, "_pagesmith_handler", True)

    root_logger.setLevel(log_level)
    root_logger.addHandler(stream_handler)

    return stream_handler
