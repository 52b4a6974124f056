# Licensed under the Apache License, Version 2.0
import logging
import os


def setup_logging(verbose: bool = False) -> None:
    level_name = os.getenv("ROT_LOG_LEVEL", "INFO").upper()
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt)
    # basicConfig is a no-op once handlers exist; keep --verbose effective anyway.
    logging.getLogger().setLevel(level)
