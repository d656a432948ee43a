import logging, pathlib, sys
from .config import get_settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

def get_logger(name: str) -> logging.Logger:
    """Per-component logger writing to <log_dir>/<name>.log and stderr.

    Reports are printed on stdout, so console logging goes to stderr to keep
    the printed results clean when they are piped into another tool.
    """
    settings = get_settings()
    logger = logging.getLogger(f"compiler_benchmark.{name}")
    if logger.handlers:
        return logger

    log_dir = pathlib.Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.setLevel(settings.log_level.upper())
    logger.propagate = False

    fmt = logging.Formatter(_FORMAT)
    fh = logging.FileHandler(log_dir / f"{name}.log", encoding="utf-8")
    ch = logging.StreamHandler(sys.stderr)
    fh.setFormatter(fmt); ch.setFormatter(fmt)
    logger.addHandler(fh); logger.addHandler(ch)
    return logger
