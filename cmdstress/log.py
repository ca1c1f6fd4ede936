import logging

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbosity: int = 0) -> None:
    if verbosity < 0:
        level = logging.WARNING
    elif verbosity == 0:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=_FORMAT, datefmt="%H:%M:%S")
    logging.getLogger("cmdstress").setLevel(level)
