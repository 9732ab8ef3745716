# infrastructure/logging/log_setup.py
import sys

from loguru import logger

CLI_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}"


def setup_console_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(lambda msg: print(msg, end=""), level=level, format=CLI_FORMAT, colorize=sys.stdout.isatty())
