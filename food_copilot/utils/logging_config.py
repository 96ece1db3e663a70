import logging
import sys

from food_copilot.config import LOG_LEVEL

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Per-request chatter from the HTTP client drowns the pipeline stage logs
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level=None):
    """Stdout logging for the copilot service; level from FOOD_COPILOT_LOG_LEVEL."""
    if level is None:
        level = getattr(logging, LOG_LEVEL, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stdout)])

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
