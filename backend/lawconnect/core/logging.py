import contextvars
import logging
import json
import datetime
from typing import Any, Dict, Optional

_request_path: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("lawconnect_request_path", default=None)
_user_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("lawconnect_user_id", default=None)

def bind_request(path: Optional[str]) -> contextvars.Token:
    """Tag log lines emitted while handling this request with its path."""
    _user_id.set(None)
    return _request_path.set(path)

def unbind_request(token: contextvars.Token) -> None:
    _request_path.reset(token)
    _user_id.set(None)

def bind_user(user_id: Optional[str]) -> None:
    _user_id.set(user_id)

class JSONLogFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings for logs.
    """
    def get_log_dict(self, record: logging.LogRecord) -> Dict[str, Any]:
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        path = _request_path.get()
        if path:
            log_obj["path"] = path
        user_id = _user_id.get()
        if user_id:
            log_obj["user_id"] = user_id

        # Add any extra attributes passed in the extra dict
        if hasattr(record, "extra_data"):
            log_obj.update(record.extra_data)

        return log_obj

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self.get_log_dict(record), default=str)

def setup_logging(level: str = "INFO"):
    """
    Setup the root logger with JSON formatting.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplication if re-initialized
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(JSONLogFormatter())
    root_logger.addHandler(stream_handler)

    # Set levels for some noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger
