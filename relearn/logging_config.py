"""
Structured logging configuration.

Emits both human-readable and JSON logs. JSON logs include:
- Timestamp
- Level
- Logger name
- Learner name
- Episode length
- Policy size (number of states)
- Any extra fields passed to StructuredLogger
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Optional


class JSONFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "ts": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "learner", None):
            log_data["learner"] = record.learner
        if getattr(record, "event_type", None):
            log_data["event"] = record.event_type
        if getattr(record, "episode_len", None) is not None:
            log_data["episode_len"] = record.episode_len
        if getattr(record, "policy_states", None) is not None:
            log_data["policy_states"] = record.policy_states
        if getattr(record, "extra_data", None):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable format with colors."""

    COLORS = {
        "DEBUG": "\033[36m",    # Cyan
        "INFO": "\033[32m",     # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",    # Red
        "CRITICAL": "\033[35m", # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        level = record.levelname[:4]

        prefix_parts = [f"{timestamp} {level}"]
        if getattr(record, "learner", None):
            prefix_parts.append(f"[{record.learner}]")
        if getattr(record, "episode_len", None) is not None:
            prefix_parts.append(f"steps={record.episode_len}")

        prefix = " ".join(prefix_parts)
        message = record.getMessage()

        if getattr(record, "policy_states", None) is not None:
            message = f"{message} (states={record.policy_states})"

        line = f"{prefix}: {message}"

        if self.use_colors and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, "")
            line = f"{color}{line}{self.RESET}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class StructuredLogger(logging.Logger):
    """Logger with structured logging methods."""

    def _log_structured(
        self,
        level: int,
        msg: str,
        learner: Optional[str] = None,
        event_type: Optional[str] = None,
        episode_len: Optional[int] = None,
        policy_states: Optional[int] = None,
        **extra: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return
        self._log(
            level,
            msg,
            (),
            extra={
                "learner": learner,
                "event_type": event_type,
                "episode_len": episode_len,
                "policy_states": policy_states,
                "extra_data": extra,
            },
        )

    def event(self, event_type: str, msg: str, **kwargs: Any) -> None:
        """Log an event."""
        self._log_structured(logging.INFO, msg, event_type=event_type, **kwargs)

    def episode(
        self,
        learner: str,
        episode_len: int,
        policy_states: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        """Log one learning pass."""
        self._log_structured(
            logging.DEBUG,
            f"{learner} pass completed",
            learner=learner,
            event_type="episode",
            episode_len=episode_len,
            policy_states=policy_states,
            **kwargs,
        )


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    json_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files
        json_file: Path for JSON logs (in log_dir if relative)
        max_bytes: Max size per log file
        backup_count: Number of backup files to keep
    """
    logging.setLoggerClass(StructuredLogger)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(HumanFormatter())
    root_logger.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

        human_path = os.path.join(log_dir, "relearn.log")
        human_handler = RotatingFileHandler(
            human_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        human_handler.setFormatter(HumanFormatter(use_colors=False))
        root_logger.addHandler(human_handler)

        json_path = json_file or os.path.join(log_dir, "relearn.json.log")
        if not os.path.isabs(json_path):
            json_path = os.path.join(log_dir, json_path)

        json_handler = RotatingFileHandler(
            json_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        json_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(json_handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger (call configure_logging first)."""
    return logging.getLogger(name)  # type: ignore
