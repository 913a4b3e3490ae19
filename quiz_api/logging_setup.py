from __future__ import annotations
import logging

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def setup_console_logging(level: int = logging.INFO) -> None:
    """
    Send service logs (session lifecycle, deadline timers) to stderr.
    Safe to call again; a second call only changes the level.
    """
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)

    # Request lines are noise next to the session log
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))
