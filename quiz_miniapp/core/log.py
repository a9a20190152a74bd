import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # keep per-request access lines out of DEBUG runs
    logging.getLogger("httpx").setLevel(logging.WARNING)
