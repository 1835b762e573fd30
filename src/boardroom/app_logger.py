import logging, os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DEFAULT_LEVEL = os.getenv("BOARDROOM_LOG_LEVEL", "INFO").upper()

def setup_logging():
    # Configure root once
    logging.basicConfig(level=getattr(logging, _DEFAULT_LEVEL, logging.INFO), format=LOG_FORMAT)

    # Main app logger
    logger = logging.getLogger("boardroom")
    logger.setLevel(getattr(logging, _DEFAULT_LEVEL, logging.INFO))
    return logger

def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger("boardroom")
    return base.getChild(name) if name else base

logger = setup_logging()
