# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Metrics Collector for lwgraph

Records per-call evaluation latency and error counts.

Example:
    from lwgraph.observability import MetricsCollector, InferenceMetrics

    collector = MetricsCollector()
    collector.record_inference(InferenceMetrics(latency_ms=0.08))
    print(collector.get_summary())
"""

import threading
from collections import deque
from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class InferenceMetrics:
    """
    Metrics for a single evaluation call.

    Attributes:
        latency_ms: Evaluation latency in milliseconds
        output_name: Output that was evaluated
        graph_name: Optional graph identifier
    """

    latency_ms: float
    output_name: Optional[str] = None
    graph_name: Optional[str] = None


class MetricsCollector:
    """
    Thread-safe collection of evaluation metrics.

    A shared LightweightGraph may be evaluated from several threads,
    so every update happens under a lock. Latency statistics cover the
    most recent `max_samples` calls; counts cover every call.
    """

    def __init__(self, max_samples: int = 10000):
        self._lock = threading.Lock()
        self._latencies: deque = deque(maxlen=max_samples)
        self._total = 0
        self._per_output: dict[str, int] = {}
        self._error_count = 0

    def record_inference(self, metrics: InferenceMetrics) -> None:
        with self._lock:
            self._latencies.append(metrics.latency_ms)
            self._total += 1
            if metrics.output_name is not None:
                self._per_output[metrics.output_name] = (
                    self._per_output.get(metrics.output_name, 0) + 1
                )

    def record_error(self) -> None:
        with self._lock:
            self._error_count += 1

    def get_summary(self) -> dict:
        """
        Get summary statistics.

        Returns:
            Dictionary with counts and latency percentiles
        """
        with self._lock:
            latencies = np.array(self._latencies)
            total = self._total
            per_output = dict(self._per_output)
            errors = self._error_count

        if latencies.size == 0:
            return {"total_inferences": 0, "error_count": errors}

        return {
            "total_inferences": total,
            "error_count": errors,
            "per_output": per_output,
            "latency_mean_ms": float(np.mean(latencies)),
            "latency_min_ms": float(np.min(latencies)),
            "latency_max_ms": float(np.max(latencies)),
            "latency_p50_ms": float(np.percentile(latencies, 50)),
            "latency_p90_ms": float(np.percentile(latencies, 90)),
            "latency_p99_ms": float(np.percentile(latencies, 99)),
        }

    def reset(self) -> None:
        with self._lock:
            self._latencies.clear()
            self._total = 0
            self._per_output.clear()
            self._error_count = 0

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus text format."""
        summary = self.get_summary()
        if not summary.get("total_inferences"):
            return ""

        lines = [
            "# HELP lwgraph_inference_total Total number of evaluations",
            "# TYPE lwgraph_inference_total counter",
            f"lwgraph_inference_total {summary['total_inferences']}",
            "",
            "# HELP lwgraph_inference_errors_total Total failed evaluations",
            "# TYPE lwgraph_inference_errors_total counter",
            f"lwgraph_inference_errors_total {summary['error_count']}",
            "",
            "# HELP lwgraph_inference_latency_ms Evaluation latency",
            "# TYPE lwgraph_inference_latency_ms summary",
        ]
        for quantile, key in (("0.5", "p50"), ("0.9", "p90"), ("0.99", "p99")):
            lines.append(
                f'lwgraph_inference_latency_ms{{quantile="{quantile}"}} '
                f"{summary[f'latency_{key}_ms']:.3f}"
            )
        return "\n".join(lines)


_global_collector: Optional[MetricsCollector] = None
_global_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector."""
    global _global_collector
    with _global_lock:
        if _global_collector is None:
            _global_collector = MetricsCollector()
        return _global_collector


def reset_metrics_collector() -> None:
    """Reset the global metrics collector."""
    global _global_collector
    with _global_lock:
        _global_collector = None
