"""
Console logging for the command line.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Sends ecsctl logs to stderr at ``level``. botocore stays at WARNING
    unless DEBUG is asked for.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger("ecsctl")
    root.handlers[:] = [handler]
    root.setLevel(numeric)

    logging.getLogger("botocore").setLevel(numeric if numeric <= logging.DEBUG else logging.WARNING)
