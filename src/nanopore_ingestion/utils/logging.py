# ============================================================================
# src/nanopore_ingestion/utils/logging.py
# ============================================================================
"""
Logging setup, JSON output and job correlation.
"""

import functools
import inspect
import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_json: bool = False
) -> None:
    """Configure the root logger: stdout always, plus log_file when given."""
    formatter = JsonFormatter() if format_json else logging.Formatter(CONSOLE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level.upper(), handlers=handlers, force=True)


class JsonFormatter(logging.Formatter):
    """One JSON object per record; carries job_id when set by LogContext."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        job_id = getattr(record, 'job_id', None)
        if job_id:
            entry['job_id'] = job_id
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


class LogContext:
    """Stamp extra attributes (e.g. job_id) on every record created inside the block."""

    def __init__(self, logger: logging.Logger, **context):
        self.logger = logger
        self.context = context
        self._previous = None

    def __enter__(self):
        self._previous = previous = logging.getLogRecordFactory()
        context = self.context

        def factory(*args, **kwargs):
            record = previous(*args, **kwargs)
            record.__dict__.update(context)
            return record

        logging.setLogRecordFactory(factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self._previous)


def log_performance(logger: logging.Logger, operation: str):
    """Log how long a coroutine (or plain function) took, or how long it ran before failing."""

    def report(start: float, error: Optional[Exception] = None) -> None:
        elapsed = time.perf_counter() - start
        if error is None:
            logger.info(f"{operation} completed in {elapsed:.3f}s")
        else:
            logger.error(f"{operation} failed after {elapsed:.3f}s: {error}")

    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def timed_async(*args, **kwargs):
                start = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(start, e)
                    raise
                report(start)
                return result
            return timed_async

        @functools.wraps(func)
        def timed(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(start, e)
                raise
            report(start)
            return result
        return timed

    return decorator
