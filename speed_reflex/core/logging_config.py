"""Logging configuration with per-run IDs and rotating log files.

Every record carries the ``run_id`` of the game session that produced it, so
the console output and the rotated log files of several runs on the same
device can be told apart.
"""
import logging
import logging.handlers
import sys
import json
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union
from pathlib import Path
from contextvars import ContextVar

# Current game run; set once per process by start_run()
run_id: ContextVar[Optional[str]] = ContextVar('run_id', default=None)

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime', 'run_id'}

NO_RUN_ID = 'no-run-id'


class RunIDFilter(logging.Filter):
    """Stamps ``record.run_id`` from the current run context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id.get() or NO_RUN_ID
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for shipping logs off the training rig."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'run_id': getattr(record, 'run_id', NO_RUN_ID),
            'message': record.getMessage(),
            'where': f'{record.module}.{record.funcName}:{record.lineno}',
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        extra = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES}
        if extra:
            entry['extra'] = extra
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``time - logger - LEVEL - [run] message`` for the console and log files."""

    def __init__(self, include_run_id: bool = True):
        run_part = '[%(run_id)s] ' if include_run_id else ''
        super().__init__(f'%(asctime)s - %(name)s - %(levelname)s - {run_part}%(message)s')


class LoggingManager:
    """Installs the game's handlers on the root logger and tracks them for shutdown."""

    def __init__(self):
        self._configured = False
        self._handlers: Dict[str, logging.Handler] = {}
        self._run_filter = RunIDFilter()
        self._startup_buffer: Optional[logging.handlers.BufferingHandler] = None

    @property
    def is_configured(self) -> bool:
        return self._configured

    def configure(
        self,
        log_level: str = 'INFO',
        log_dir: Optional[Union[str, Path]] = None,
        enable_file_logging: bool = True,
        enable_console_logging: bool = True,
        structured_logging: bool = False,
        max_file_size: int = 5 * 1024 * 1024,
        backup_count: int = 3,
        application_name: str = 'speed-reflex'
    ) -> None:
        """Configure logging once per process.

        Args:
            log_level: Name of the level for console and application log
            log_dir: Directory for the rotating log files (default ``logs``)
            enable_file_logging: Write ``<name>.log`` and ``<name>-errors.log``
            enable_console_logging: Echo records to stdout
            structured_logging: One JSON object per record instead of plain text
            max_file_size: Bytes before a log file rotates
            backup_count: Rotated files kept per log
            application_name: Base name of the log files
        """
        if self._configured:
            return

        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
        formatter = StructuredFormatter() if structured_logging else HumanReadableFormatter()

        pending = self._take_startup_records()
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        if enable_console_logging:
            self._attach('console', logging.StreamHandler(sys.stdout), level, formatter)

        if enable_file_logging:
            directory = Path(log_dir or 'logs')
            directory.mkdir(parents=True, exist_ok=True)
            for key, suffix, handler_level in (('application', '', level), ('errors', '-errors', logging.ERROR)):
                handler = logging.handlers.RotatingFileHandler(
                    directory / f'{application_name}{suffix}.log',
                    maxBytes=max_file_size,
                    backupCount=backup_count,
                    encoding='utf-8',
                )
                self._attach(key, handler, handler_level, formatter)

        # ultralytics logs every inference at INFO
        logging.getLogger('ultralytics').setLevel(logging.WARNING)

        for record in pending:
            if record.levelno >= level:
                root_logger.handle(record)

        self._configured = True
        logging.getLogger(__name__).info(
            f"Logging configured at {logging.getLevelName(level)} "
            f"(handlers: {', '.join(self._handlers) or 'none'})")

    def buffer_startup(self, capacity: int = 1000) -> None:
        """Hold records logged before configure() so they reach its handlers.

        Config loading runs before the log settings are known; without this
        its warnings would only hit the last-resort stderr handler.
        """
        if self._configured or self._startup_buffer is not None:
            return
        self._startup_buffer = logging.handlers.BufferingHandler(capacity)
        root_logger = logging.getLogger()
        root_logger.addHandler(self._startup_buffer)
        root_logger.setLevel(logging.DEBUG)

    def _take_startup_records(self) -> List[logging.LogRecord]:
        buffer, self._startup_buffer = self._startup_buffer, None
        if buffer is None:
            return []
        logging.getLogger().removeHandler(buffer)
        records = list(buffer.buffer)
        buffer.close()
        return records

    def _attach(self, key: str, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(self._run_filter)
        logging.getLogger().addHandler(handler)
        self._handlers[key] = handler

    def start_run(self, new_run_id: Optional[str] = None) -> str:
        """Tag subsequent records with ``new_run_id`` (a fresh short id if omitted)."""
        new_run_id = new_run_id or uuid.uuid4().hex[:8]
        run_id.set(new_run_id)
        return new_run_id

    def get_run_id(self) -> Optional[str]:
        return run_id.get()

    def shutdown(self) -> None:
        root_logger = logging.getLogger()
        self._take_startup_records()
        while self._handlers:
            _, handler = self._handlers.popitem()
            root_logger.removeHandler(handler)
            handler.close()
        self._configured = False


# Global logging manager instance
logging_manager = LoggingManager()


def configure_logging(**kwargs) -> None:
    """Configure application logging."""
    logging_manager.configure(**kwargs)


def start_run(new_run_id: Optional[str] = None) -> str:
    return logging_manager.start_run(new_run_id)


def get_run_id() -> Optional[str]:
    return logging_manager.get_run_id()


def buffer_startup_logs() -> None:
    logging_manager.buffer_startup()
