# bot/logging_setup.py
"""
Loguru sinks for the bot: coloured console + rotating file under logs/.
discord.py logs through the stdlib `logging` module, so those records are
forwarded into loguru as well.
"""

import logging
import sys

from loguru import logger

from bot import config


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that made the logging call
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = config.LOG_LEVEL) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        colorize=True,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan> - <level>{message}</level>"
        ),
    )
    logger.add(
        config.LOG_FILE,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        rotation="10 MB",
        retention="14 days",
        encoding="utf-8",
    )
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger("discord").setLevel(logging.INFO)
