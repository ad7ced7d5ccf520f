import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure the root logger for applications embedding stridelite.

    The library itself never installs handlers; it only emits records on
    loggers named after its modules. Call this from an application entry
    point to see them on stdout.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
