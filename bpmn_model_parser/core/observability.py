"""
Observability Infrastructure

Structured logging through loguru and tracing spans through OpenTelemetry.
Library modules log with the standard ``logging`` module; once
``ObservabilityManager`` is initialized those records are forwarded to the
loguru sinks it configures.
"""

import contextlib
import logging
import sys
import time
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Union

from loguru import logger
from opentelemetry import trace


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ObservabilityConfig:
    """Configuration for observability."""

    def __init__(
        self,
        service_name: str = "bpmn-model-parser",
        log_level: Union[str, LogLevel] = LogLevel.INFO,
        json_logs: bool = False,
        enable_tracing: bool = True,
    ):
        """Initialize observability configuration."""
        self.service_name = service_name
        self.log_level = log_level.value if isinstance(log_level, LogLevel) else log_level
        self.json_logs = json_logs
        self.enable_tracing = enable_tracing


class _LoguruForwarder(logging.Handler):
    """Forwards standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Union[str, int] = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).bind(logger_name=record.name).log(
            level, record.getMessage()
        )


class ObservabilityManager:
    """Centralized observability management."""

    _instance: Optional["ObservabilityManager"] = None

    def __init__(self, config: ObservabilityConfig):
        """Initialize observability manager."""
        self.config = config
        self.tracer: Optional[trace.Tracer] = None
        self._setup_logging()

        if config.enable_tracing:
            self.tracer = trace.get_tracer(config.service_name)

        logger.debug(
            f"Observability initialized: service={config.service_name}, "
            f"log_level={config.log_level}"
        )

    def _setup_logging(self) -> None:
        """Set up structured logging with loguru."""
        logger.remove()

        log_format = (
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        )

        # stdout is reserved for command output
        if self.config.json_logs:
            logger.add(
                sys.stderr,
                level=self.config.log_level,
                serialize=True,
                colorize=False,
            )
        else:
            logger.add(
                sys.stderr,
                format=log_format,
                level=self.config.log_level,
                colorize=True,
                backtrace=True,
                diagnose=False,
            )

        logging.basicConfig(
            handlers=[_LoguruForwarder()],
            level=self.config.log_level,
            force=True,
        )

    @classmethod
    def initialize(
        cls, config: Optional[ObservabilityConfig] = None, reset: bool = False
    ) -> "ObservabilityManager":
        """Initialize or get singleton instance.

        Args:
            config: Configuration used when a new instance is created
            reset: Replace an existing instance instead of reusing it
        """
        if cls._instance is None or reset:
            cls._instance = cls(config or ObservabilityConfig())
        return cls._instance

    @classmethod
    def get_instance(cls) -> Optional["ObservabilityManager"]:
        """Get singleton instance, if one was initialized."""
        return cls._instance


@contextlib.contextmanager
def span(name: str, attributes: Optional[Dict[str, Any]] = None) -> Iterator[Any]:
    """Context manager for creating spans.

    Without a configured tracer provider OpenTelemetry hands out
    non-recording spans, so this is safe to use from library code.
    """
    manager = ObservabilityManager.get_instance()
    tracer = manager.tracer if manager and manager.tracer else trace.get_tracer(__name__)

    with tracer.start_as_current_span(name) as span_obj:
        if attributes:
            for key, value in attributes.items():
                span_obj.set_attribute(key, value)
        yield span_obj


class Timer:
    """Context manager for timing operations."""

    def __init__(self, name: str, log: bool = True):
        """Initialize timer."""
        self.name = name
        self.log = log
        self.start_time: float = 0
        self.elapsed: float = 0

    def __enter__(self) -> "Timer":
        """Enter context."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context."""
        self.elapsed = time.perf_counter() - self.start_time
        if self.log:
            logger.debug(f"Timer '{self.name}': {self.elapsed:.3f}s")


__all__ = [
    "LogLevel",
    "ObservabilityConfig",
    "ObservabilityManager",
    "span",
    "Timer",
]
