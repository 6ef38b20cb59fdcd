import logging
from logging import StreamHandler, FileHandler, Logger
from pathlib import Path


class ModuleLogger:
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    # name of the logger at the top of the package hierarchy
    ROOT = 'fenestra'

    # specify the formatting of the log records
    FORMATTER = logging.Formatter(
        '[%(name)s | %(levelname)s] %(message)s'
    )

    @classmethod
    def create_console_handler(cls, log_level: int | None = None) -> StreamHandler:
        # Create a log handler that logs records to the console
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(cls.FORMATTER)
        console_handler.setLevel(log_level or cls.DEBUG)
        return console_handler

    @classmethod
    def create_file_handler(cls, file_path: Path | str, log_level: int | None = None) -> FileHandler:
        # Create a log handler that logs records to a file.
        file_handler = logging.FileHandler(file_path, mode='a', encoding='utf-8')
        file_handler.setFormatter(cls.FORMATTER)
        file_handler.setLevel(log_level or cls.DEBUG)
        return file_handler

    @classmethod
    def get_logger(cls, logger_name: str) -> Logger:
        """Returns the logger with `logger_name`.

        Module loggers don't get handlers of their own: their records
        propagate to the package logger, which is set up once through
        `configure_logging`.
        """
        cls.configure_logging()
        return logging.getLogger(logger_name)

    @classmethod
    def configure_logging(
        cls,
        log_level: int | None = None,
        file_path: Path | str | None = None
    ) -> Logger:
        """Sets up the package logger. The first call adds a console handler
        (and a file handler if `file_path` is not None). Subsequent calls only
        change the log level, or add a file handler if none was present yet.
        Only messages with a priority equal or higher than `log_level` will be
        logged. By default, only warnings and errors are logged.
        """
        logger = logging.getLogger(cls.ROOT)
        if not logger.handlers:
            # don't add the handlers again when the package logger is
            # configured multiple times
            logger.addHandler(cls.create_console_handler())
            logger.setLevel(log_level or cls.WARNING)
        elif log_level is not None:
            logger.setLevel(log_level)
        if file_path is not None:
            has_file_handler = any(
                isinstance(h, FileHandler) for h in logger.handlers
            )
            if not has_file_handler:
                logger.addHandler(cls.create_file_handler(file_path))
        return logger


def configure_logging(
    log_level: int | None = None,
    file_path: Path | str | None = None
) -> Logger:
    """Sets the log level of package `fenestra` and optionally sends the log
    records to a file too.
    """
    return ModuleLogger.configure_logging(log_level, file_path)
