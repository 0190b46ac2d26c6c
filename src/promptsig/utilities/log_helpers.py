import contextlib
import logging


@contextlib.contextmanager
def suppress_logs(logger: logging.Logger):
    """Context manager to temporarily disable logs."""
    disabled = logger.disabled
    try:
        logger.disabled = True
        yield
    finally:
        logger.disabled = disabled
