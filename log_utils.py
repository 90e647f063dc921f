import logging
import logging.handlers
import json
import os
import uuid
from pathlib import Path
from typing import Any, Optional

from flask import request, g, has_request_context


class EnhancedJSONFormatter(logging.Formatter):
    """JSON log formatter with request and API version context."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process_id": os.getpid(),
        }

        if has_request_context():
            log_record["request"] = {
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
                "request_id": g.get("request_id"),
            }
            if g.get("api_version"):
                log_record["api_version"] = g.api_version
                log_record["api_version_status"] = str(getattr(g.get("api_version_status"), "value", ""))

        if record.exc_info:
            log_record["exception"] = {
                "class": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        for key, value in record.__dict__.items():
            if key.startswith('custom_') or key in ['duration', 'status_code']:
                log_record[key] = value

        return json.dumps(log_record, default=str)


TEXT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(level: int = logging.INFO,
                  stream=None,
                  use_json: bool = True,
                  log_file: Optional[str] = None,
                  max_file_size: int = 10 * 1024 * 1024,
                  backup_count: int = 5) -> None:
    """Configure root logging with a console handler and optional rotating file."""

    # Remove existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)

    def make_formatter() -> logging.Formatter:
        return EnhancedJSONFormatter() if use_json else logging.Formatter(TEXT_FORMAT)

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(make_formatter())
    root_logger.addHandler(console_handler)

    log_file_path = log_file or os.environ.get('SYMBOL_API_LOG_FILE')
    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(make_formatter())
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)


def get_request_id() -> str:
    """Get or create a request ID for tracing."""
    if has_request_context():
        if not g.get('request_id'):
            g.request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        return g.request_id
    return str(uuid.uuid4())


def log_request_end(method: str, path: str, status_code: int, duration: float, **kwargs) -> None:
    """Log the end of a request with metrics."""
    logger = logging.getLogger('symbol_api.request')
    logger.info(
        f"Request completed: {method} {path} {status_code} ({duration:.3f}s)",
        extra={
            "custom_event": "request_end",
            "custom_method": method,
            "custom_path": path,
            "status_code": status_code,
            "duration": duration,
            **kwargs
        }
    )
