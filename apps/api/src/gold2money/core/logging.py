import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole app.
    Call this once when the FastAPI application is created.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
