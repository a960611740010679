import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


def configure_logging(log_file: Optional[str] = "chargectl.log", level: str = "INFO") -> None:
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s - %(message)s"
    )

    # Console
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # Rotating file (the loop runs for months)
    if log_file:
        fh = RotatingFileHandler(
            log_file, maxBytes=2_000_000, backupCount=5
        )
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # Silence noisy httpx request logging
    logging.getLogger("httpx").setLevel(logging.WARNING)
