from __future__ import annotations

import logging
import sys

RESET = "\x1b[0m"
BOLD = "\x1b[1m"
DIM = "\x1b[2m"
DIM_RESET = "\x1b[22m"
RED = "\x1b[31m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
BLUE = "\x1b[34m"
MAGENTA = "\x1b[35m"
CYAN = "\x1b[36m"
GRAY = "\x1b[90m"

LEVEL_COLOURS = {
    logging.DEBUG: GRAY,
    logging.WARNING: YELLOW,
    logging.ERROR: RED,
    logging.CRITICAL: RED + BOLD,
}


def paint(text: object, *styles: str) -> str:
    return "".join(styles) + str(text) + RESET


class ColourFormatter(logging.Formatter):
    """Colours the whole line by level; info lines stay plain."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        colour = LEVEL_COLOURS.get(record.levelno)
        if not colour:
            return message
        return paint(message, colour)


def configure_logging(verbose: bool = False, stream=None) -> logging.Logger:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ColourFormatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    # The router writes its own request lines.
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    return root
