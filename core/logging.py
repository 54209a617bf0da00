import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure logging for the whole app.
    Call this once at API startup (or from a script before touching the store).
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


logger = logging.getLogger("clarity")
