"""
Workflow utilities: logging setup, structured logging, graceful shutdown.
"""
import json
import logging
import signal
import threading
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Basic console logging for CLI runs."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def setup_graceful_shutdown(stop_event: threading.Event | None = None) -> threading.Event:
    """
    Register SIGTERM/SIGINT handlers that set stop_event instead of killing the process,
    so the frame loop can stop and the encoder can be torn down. Returns the event.
    """
    event = stop_event or threading.Event()

    def _request_stop(signum: int, _frame: Any) -> None:
        logger.warning("Signal %s received; stopping after the current frame", signum)
        event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            signal.signal(sig, _request_stop)
        except (AttributeError, ValueError):
            pass  # Windows or not on the main thread
    return event


def log_structured(level: str, **kwargs: Any) -> None:
    """Emit structured (JSON) log line, e.g. the end-of-run summary."""
    record = {"level": level, **kwargs}
    line = json.dumps(record, default=str)
    if level == "error":
        logger.error("%s", line)
    elif level == "warning":
        logger.warning("%s", line)
    else:
        logger.info("%s", line)
