"""Package logger. Everything goes to stderr so stdout only carries codes."""

import logging
import sys

_handler = logging.StreamHandler(sys.stderr)
_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))

logger = logging.getLogger("tiny2fa")
logger.addHandler(_handler)
logger.setLevel(logging.WARNING)


def set_verbose(verbose: bool) -> None:
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
