"""
Structured logging for pipeline events.

Provides JSON-formatted logs with timestamps and structured fields.
"""
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter."""

    EXCLUDED_ATTRS = {
        'name', 'msg', 'args', 'levelname', 'levelno',
        'pathname', 'filename', 'module', 'exc_info',
        'exc_text', 'stack_info', 'lineno', 'funcName',
        'created', 'msecs', 'relativeCreated', 'thread',
        'threadName', 'processName', 'process', 'message',
        'asctime', 'taskName'
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted string
        """
        log_data = {
            "timestamp": datetime.now().isoformat(),
            "level": record.levelname,
            "event": record.getMessage(),
            "logger": record.name,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in self.EXCLUDED_ATTRS:
                # Handle non-serializable objects
                try:
                    json.dumps(value)
                    log_data[key] = value
                except (TypeError, ValueError):
                    log_data[key] = str(value)

        return json.dumps(log_data)


class StructuredLogger:
    """Structured logger wrapper with convenience methods."""

    def __init__(
        self,
        name: str = "qa_agent",
        level: int = logging.INFO,
        enable_console: bool = True,
        enable_file: bool = False,
        log_file: Optional[str] = None
    ):
        """Initialize structured logger.

        Args:
            name: Logger name
            level: Logging level
            enable_console: Output to console (stderr, so CLI output stays clean)
            enable_file: Output to file
            log_file: Path to log file
        """
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.handlers = []  # Clear existing handlers
        self._logger.propagate = False

        formatter = StructuredFormatter()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self._logger.addHandler(console_handler)

        if enable_file and log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            self._logger.addHandler(file_handler)

    @property
    def name(self) -> str:
        return self._logger.name

    def info(self, event: str, **kwargs: Any) -> None:
        self._logger.info(event, extra=kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._logger.warning(event, extra=kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self._logger.error(event, extra=kwargs)

    def debug(self, event: str, **kwargs: Any) -> None:
        self._logger.debug(event, extra=kwargs)

    def log_parse(
        self,
        task_id: Optional[int],
        num_steps: int,
        num_questions: int,
        fallback_used: bool = False
    ) -> None:
        """Log an acceptance criteria parse.

        Args:
            task_id: Work item the criteria came from (None for ad-hoc text)
            num_steps: Steps produced
            num_questions: Clarifying questions raised
            fallback_used: Whether the description fallback was used
        """
        self._logger.info(
            "criteria_parsed",
            extra={
                "task_id": task_id,
                "num_steps": num_steps,
                "num_questions": num_questions,
                "fallback_used": fallback_used
            }
        )

    def log_generation(self, test_case_id: str, file_name: str, unclassified_steps: int) -> None:
        """Log a generated Playwright script."""
        self._logger.info(
            "script_generated",
            extra={
                "test_case_id": test_case_id,
                "file_name": file_name,
                "unclassified_steps": unclassified_steps
            }
        )

    def log_step(
        self,
        test_case_id: str,
        step_number: int,
        success: bool,
        duration_ms: float,
        error: Optional[str] = None
    ) -> None:
        """Log a single executed step.

        Args:
            test_case_id: Test case being run
            step_number: Step number within the test case
            success: Whether the step passed
            duration_ms: Step duration in milliseconds
            error: Error message if failed
        """
        level = logging.INFO if success else logging.ERROR
        self._logger.log(
            level,
            "step_executed",
            extra={
                "test_case_id": test_case_id,
                "step_number": step_number,
                "success": success,
                "duration_ms": round(duration_ms, 2),
                "error": error
            }
        )

    def log_run(self, test_case_id: str, summary: Dict[str, Any]) -> None:
        """Log a completed live run."""
        self._logger.info(
            "run_completed",
            extra={"test_case_id": test_case_id, **summary}
        )

    def log_memory_event(self, operation: str, path: str, **kwargs: Any) -> None:
        """Log a memory store operation (load, fallback, flush, reset)."""
        self._logger.info(
            "memory_" + operation,
            extra={"path": path, **kwargs}
        )


_default_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get the shared pipeline logger, created on first use."""
    global _default_logger
    if _default_logger is None:
        from core.config.environment import EnvironmentConfig
        level = logging.getLevelName(EnvironmentConfig.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.WARNING
        _default_logger = StructuredLogger(name="qa_agent", level=level)
    return _default_logger
