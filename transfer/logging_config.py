import logging
import os

DEFAULT_FORMAT = "%(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str | int | None = None) -> None:
    """Route progress output to stderr; LOG_LEVEL overrides the default."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.captureWarnings(True)

    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(level)
    verbose = root.getEffectiveLevel() <= logging.DEBUG

    fmt = logging.Formatter(
        fmt=VERBOSE_FORMAT if verbose else DEFAULT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    root.addHandler(sh)

    log_file = os.getenv("LOG_FILE_PATH")
    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(logging.Formatter(fmt=VERBOSE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(fh)
