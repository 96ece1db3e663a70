import time
import logging
import functools

logger = logging.getLogger(__name__)


class DirectiveValidationError(ValueError):
    """A directive failed its kind contract. Internal to the schema validator."""

    def __init__(self, kind: str, reason: str):
        super().__init__(f"{kind}: {reason}")
        self.kind = kind
        self.reason = reason


class GeneratorError(RuntimeError):
    """The external generator failed or returned nothing usable."""


def retry_with_backoff(retries=3, backoff_in_seconds=1, retry_on=(GeneratorError,)):
    """
    Retry transient generator failures with exponential backoff.
    Exceptions outside retry_on propagate on the first attempt.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(retries + 1):
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    if attempt == retries:
                        logger.error(f"[GENERATOR] {func.__name__} failed after {retries} retries: {e}")
                        raise
                    delay = backoff_in_seconds * (2 ** attempt)
                    logger.warning(f"[GENERATOR] {func.__name__} attempt {attempt + 1} failed, retrying in {delay}s: {e}")
                    time.sleep(delay)
        return wrapper
    return decorator


class ErrorMessageFormatter:
    """
    Upstream failures reach the user as one generic message; the cause
    stays in the logs.
    """
    GENERIC_FAILURE = "Analysis failed. Please try again."

    @staticmethod
    def format(error):
        logger.debug(f"Formatting upstream failure for display: {error}")
        return ErrorMessageFormatter.GENERIC_FAILURE
