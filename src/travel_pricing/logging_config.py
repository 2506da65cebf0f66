"""Logging setup shared by the API and the command line scripts."""
import logging


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
    # Keep server access logs quiet next to pricing output
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
