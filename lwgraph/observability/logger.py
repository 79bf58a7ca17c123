# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Structured Logger for lwgraph

Structured, levelled log lines in text or JSON form, for graph
construction and command line runs. Module-level debug traces use the
standard `logging` loggers under "lwgraph.*".

Example:
    from lwgraph.observability import GraphLogger, Verbosity

    logger = GraphLogger.get()
    logger.set_verbosity(Verbosity.INFO)
    logger.info("Graph built", component="graph", graph_name="tagger")
"""

import json
import os
import sys
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Callable, Optional, TextIO


class Verbosity(IntEnum):
    """Logging verbosity levels, comparable as integers."""

    SILENT = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4


@dataclass
class LogEntry:
    """
    Structured log entry.

    Attributes:
        level: Log level (ERROR, WARNING, INFO, DEBUG)
        message: Log message
        timestamp: ISO format timestamp
        component: Source component (graph, parser, cli)
        graph_name: Optional graph identifier
        operation: Optional operation name
        duration_ms: Optional duration in milliseconds
        extra: Additional context fields
    """

    level: str
    message: str
    timestamp: str
    component: str = "lwgraph"
    graph_name: Optional[str] = None
    operation: Optional[str] = None
    duration_ms: Optional[float] = None
    extra: dict = field(default_factory=dict)

    def to_json(self) -> str:
        data = {k: v for k, v in asdict(self).items() if v is not None}
        if not data.get("extra"):
            data.pop("extra", None)
        return json.dumps(data, default=str)

    def to_text(self) -> str:
        parts = [f"[{self.level}]", f"[{self.component}]", self.message]
        if self.duration_ms is not None:
            parts.append(f"({self.duration_ms:.3f}ms)")
        return " ".join(parts)


class GraphLogger:
    """
    Process-wide structured logger.

    The initial verbosity comes from the LWGRAPH_VERBOSITY environment
    variable (0-4) and defaults to WARNING.
    """

    _instance: Optional["GraphLogger"] = None
    _lock = threading.Lock()

    def __init__(self):
        self._verbosity = Verbosity.WARNING
        self._output: TextIO = sys.stderr
        self._json_format = False
        self._handlers: list[Callable[[LogEntry], None]] = []

        env_verbosity = os.environ.get("LWGRAPH_VERBOSITY")
        if env_verbosity is not None:
            try:
                self.set_verbosity(int(env_verbosity))
            except ValueError:
                pass

    @classmethod
    def get(cls) -> "GraphLogger":
        """Get the singleton logger instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = GraphLogger()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        with cls._lock:
            cls._instance = None

    def set_verbosity(self, level: int) -> None:
        """Set verbosity, clamping plain integers to 0-4."""
        if isinstance(level, Verbosity):
            self._verbosity = level
        else:
            self._verbosity = Verbosity(max(0, min(4, level)))

    def get_verbosity(self) -> Verbosity:
        return self._verbosity

    def set_json_format(self, enabled: bool) -> None:
        self._json_format = enabled

    def set_output(self, output: TextIO) -> None:
        self._output = output

    def add_handler(self, handler: Callable[[LogEntry], None]) -> None:
        """Call `handler` with every emitted entry."""
        self._handlers.append(handler)

    def _log(self, level: Verbosity, message: str, context: dict) -> None:
        if self._verbosity < level:
            return
        entry = LogEntry(
            level=level.name,
            message=message,
            timestamp=datetime.now().isoformat(),
            component=context.pop("component", "lwgraph"),
            graph_name=context.pop("graph_name", None),
            operation=context.pop("operation", None),
            duration_ms=context.pop("duration_ms", None),
            extra=context,
        )
        line = entry.to_json() if self._json_format else entry.to_text()
        self._output.write(line + "\n")
        self._output.flush()
        for handler in self._handlers:
            handler(entry)

    def debug(self, message: str, **context) -> None:
        self._log(Verbosity.DEBUG, message, context)

    def info(self, message: str, **context) -> None:
        self._log(Verbosity.INFO, message, context)

    def warning(self, message: str, **context) -> None:
        self._log(Verbosity.WARNING, message, context)

    def error(self, message: str, **context) -> None:
        self._log(Verbosity.ERROR, message, context)


def get_logger() -> GraphLogger:
    """Get the global lwgraph logger."""
    return GraphLogger.get()


def set_verbosity(level: int) -> None:
    """
    Set global verbosity level.

    Args:
        level: Verbosity level (0=SILENT, 1=ERROR, 2=WARNING, 3=INFO, 4=DEBUG)
    """
    GraphLogger.get().set_verbosity(level)
