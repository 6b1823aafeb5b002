import logging
import json
import os
from pathlib import Path
import threading

from flask import has_request_context, request


ROOT_LOGGER_NAME = "warranty_tracker"


class SingletonLogger:
    """
    Singleton that configures the ``warranty_tracker`` logger exactly once per
    process. Module loggers are children of it and share its handlers.
    """
    _instance = None
    _lock = threading.Lock()
    _logger = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    self._logger = None
                    self._initialized = True

    def get_logger(self, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        """
        Get a logger below the configured application logger.

        Args:
            name (str): Dotted logger name, e.g. "warranty_tracker.equipment"

        Returns:
            logging.Logger: Logger sharing the application handlers
        """
        if self._logger is None:
            with self._lock:
                if self._logger is None:
                    self._logger = self._create_logger()
        if name == ROOT_LOGGER_NAME or not name.startswith(ROOT_LOGGER_NAME + "."):
            return self._logger
        return logging.getLogger(name)

    def _create_logger(self) -> logging.Logger:
        """
        Create the application logger with file and console handlers.

        The log directory comes from WARRANTY_TRACKER_LOG_DIR (default ``logs``).
        """
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.handlers.clear()

        formatter = JsonFormatter()

        logs_dir = Path(os.environ.get("WARRANTY_TRACKER_LOG_DIR", "logs"))
        logs_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(logs_dir / "warranty_tracker.log", mode='w', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        error_file_handler = logging.FileHandler(logs_dir / "errors.log", mode='w', encoding='utf-8')
        error_file_handler.setLevel(logging.ERROR)
        error_file_handler.setFormatter(formatter)
        logger.addHandler(error_file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        return logger


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record.

    ``fields`` maps output keys to LogRecord attributes. Values passed through
    ``extra={'context': {...}}`` are merged in, and records emitted while a
    Flask request is active carry its method and path.
    """

    DEFAULT_FIELDS = {
        "timestamp": "asctime",
        "level": "levelname",
        "logger": "name",
        "module": "module",
        "function": "funcName",
        "line": "lineno",
        "message": "message",
    }

    def __init__(self, fields: dict = None):
        super().__init__()
        self.fields = fields or self.DEFAULT_FIELDS
        self.default_time_format = "%Y-%m-%dT%H:%M:%S"
        self.default_msec_format = "%s.%03dZ"

    def format(self, record) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record, self.datefmt)

        entry = {key: getattr(record, attr, None) for key, attr in self.fields.items()}

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            entry.update(context)

        if has_request_context():
            entry["request"] = f"{request.method} {request.path}"

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exc_info"] = record.exc_text
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)



def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger wired to the singleton application handlers.

    Args:
        name (str): Logger name below "warranty_tracker"

    Returns:
        logging.Logger: The logger instance
    """
    return SingletonLogger().get_logger(name)
