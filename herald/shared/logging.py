import logging

from herald.shared.config import LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_configured = False


def configure_logging(level: str | None = None) -> None:
    global _configured
    lvl = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    if not _configured:
        logging.basicConfig(level=lvl, format=_FORMAT)
        _configured = True
    logging.getLogger("herald").setLevel(lvl)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"herald.{name}")
