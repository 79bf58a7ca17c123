# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
lwgraph Observability Module

- GraphLogger: structured logging with text or JSON output
- MetricsCollector: evaluation latency and error statistics
"""

from .logger import (
    Verbosity,
    LogEntry,
    GraphLogger,
    get_logger,
    set_verbosity,
)

from .metrics import (
    InferenceMetrics,
    MetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)

__all__ = [
    # Logger
    "Verbosity",
    "LogEntry",
    "GraphLogger",
    "get_logger",
    "set_verbosity",
    # Metrics
    "InferenceMetrics",
    "MetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
