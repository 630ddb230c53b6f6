import logging
import logging.handlers

from limitkeeper.config import DEFAULT_LOG_FILE

DT_FMT = "%Y-%m-%d %H:%M:%S"
LOG_FMT = "[{asctime}] [{levelname:<8}] {name}: {message}"


def setup_logging(log_file: str = DEFAULT_LOG_FILE, level: int = logging.INFO):
    adjust_unused_logging()
    setup_terminal_logging(level)
    return setup_file_logging(log_file)


def setup_file_logging(log_file: str):
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        encoding="utf-8",
        maxBytes=32 * 1024 * 1024,  # 32 MiB
        backupCount=5,  # Rotate through 5 files
    )
    handler.setFormatter(logging.Formatter(LOG_FMT, DT_FMT, style="{"))
    logger.addHandler(handler)
    return logger


def setup_terminal_logging(level: int = logging.INFO):
    logger = logging.getLogger("limitkeeper")
    logger.setLevel(level)
    terminal_handler = logging.StreamHandler()
    terminal_handler.setFormatter(logging.Formatter(LOG_FMT, DT_FMT, style="{"))
    logger.addHandler(terminal_handler)


def adjust_unused_logging():
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
