import logging
import os
import sys


class ColoredFormatter(logging.Formatter):
    """Level-colored formatter; plain timestamps when color is off"""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',    # cyan
        'INFO': '\033[32m',     # green
        'WARNING': '\033[33m',  # yellow
        'ERROR': '\033[31m',    # red
        'CRITICAL': '\033[35m', # magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[90m'

    def __init__(self, use_colors=True, show_logger_name=False):
        super().__init__()
        self.use_colors = use_colors and self._supports_color()
        self.show_logger_name = show_logger_name

    def _supports_color(self):
        return (
            hasattr(sys.stderr, "isatty") and sys.stderr.isatty() and
            os.environ.get('TERM') != 'dumb' and
            os.environ.get('NO_COLOR') is None
        )

    def format(self, record):
        message = record.getMessage()
        if self.show_logger_name:
            message = f"[{record.name}] {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if not self.use_colors:
            return f"{self.formatTime(record, '%Y-%m-%d %H:%M:%S')} - {record.levelname} - {message}"

        level_color = self.COLORS.get(record.levelname, '')
        level_name = f"{level_color}{self.BOLD}{record.levelname:<8}{self.RESET}"
        timestamp = f"{self.DIM}{self.formatTime(record, '%H:%M:%S')}{self.RESET}"
        return f"{timestamp} {level_name} {message}"


def setup_logging(verbose=False, no_color=False):
    """Install one stderr handler on the root logger; DEBUG when verbose"""
    logger = logging.getLogger()

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    # module names only help when reading debug output
    console_handler.setFormatter(ColoredFormatter(use_colors=not no_color, show_logger_name=verbose))

    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    console_handler.setLevel(level)

    logger.addHandler(console_handler)

    return logger
