"""
Logging setup shared by the API and the client.

Modules log through ``logging.getLogger(__name__)``; ``setup_logging`` only
wires the root handler once, so calling ``create_app`` repeatedly (tests) does
not stack handlers.
"""
import logging
import time
from contextlib import contextmanager
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def setup_logging(level: str = "INFO") -> None:
    global _configured

    root = logging.getLogger()
    root.setLevel(level.upper())
    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True


@contextmanager
def log_duration(operation: str, logger: Optional[logging.Logger] = None, **fields):
    """
    Log how long the wrapped block took.

        with log_duration("llm_request", model="gpt-4o-mini"):
            client.complete(prompt)

    On error the failure is logged with the elapsed time and re-raised.
    """
    if logger is None:
        logger = logging.getLogger("code_mentor.timing")

    extra = " ".join(f"{k}={v}" for k, v in fields.items())
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.error("%s failed after %.1fms %s: %s", operation, duration_ms, extra, e)
        raise
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s completed in %.1fms %s", operation, duration_ms, extra)
