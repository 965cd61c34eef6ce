# src/common/utils/log_config.py
import logging
import sys


def configure_logging(level: str = "info") -> None:
    """Send application logs to stdout at the configured level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
