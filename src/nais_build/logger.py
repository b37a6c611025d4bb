import logging
import os
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-5s | %(message)s"
DEBUG_FORMAT = (
    "%(asctime)s | %(levelname)-5s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
)


def setup_logging(
    level: Union[int, str] = logging.INFO, stream=sys.stderr, fmt: Optional[str] = None
):
    """
    Sets up the root logger with a stream handler and basic formatting.
    Logs go to stderr so generated Dockerfiles on stdout can be piped.
    Does nothing if handlers are already configured.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    if not root_logger.hasHandlers():
        if fmt is None:
            if level == logging.DEBUG:
                fmt = DEBUG_FORMAT
            else:
                # Default format for INFO level and above
                fmt = DEFAULT_FORMAT

        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))

        root_logger.setLevel(level)
        root_logger.addHandler(handler)

    # Optionally allow log level override via env var
    env_level = os.environ.get("LOG_LEVEL")
    if env_level:
        root_logger.setLevel(env_level.upper())


def enable_debug_logging():
    """Lower the root logger to DEBUG and switch its handlers to the debug format."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers:
        handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
