"""
Metrics collection for the codec devices.
"""
import time
import json
from typing import Dict, Any
from dataclasses import dataclass, asdict
from collections import deque
import statistics


@dataclass
class OperationMetrics:
    """Metrics for a single device operation."""
    device: str
    operation: str
    timestamp_ns: int
    requested: int
    produced: int
    truncated: bool = False
    sentinel_stop: bool = False
    dropped_tail: int = 0
    corrections: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


class MetricsCollector:
    """Collects and aggregates operation metrics."""

    def __init__(self, window_size: int = 100):
        """
        Initialize metrics collector.

        Args:
            window_size: Number of operations to keep in rolling window
        """
        self.window_size = window_size
        self.operations: deque = deque(maxlen=window_size)
        self.total_operations = 0
        self.total_truncations = 0
        self.total_sentinel_stops = 0
        self.total_corrections = 0
        self.start_time = time.time()

    def add_operation(self, metrics: OperationMetrics):
        """
        Add operation metrics.

        Args:
            metrics: Operation metrics to add
        """
        self.operations.append(metrics)
        self.total_operations += 1

        if metrics.truncated:
            self.total_truncations += 1
        if metrics.sentinel_stop:
            self.total_sentinel_stops += 1
        self.total_corrections += metrics.corrections

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary statistics.

        Returns:
            Dictionary with aggregate metrics
        """
        summary = {
            "total_operations": self.total_operations,
            "window_operations": len(self.operations),
            "truncations": self.total_truncations,
            "sentinel_stops": self.total_sentinel_stops,
            "corrections": self.total_corrections,
            "runtime_s": time.time() - self.start_time,
        }

        for operation in ("write", "read"):
            sizes = [m.produced for m in self.operations if m.operation == operation]
            if sizes:
                summary[f"{operation}_bytes"] = {
                    "count": len(sizes),
                    "mean": statistics.mean(sizes),
                    "min": min(sizes),
                    "max": max(sizes),
                }

        return summary

    def export_json(self, filename: str):
        """
        Export summary and windowed operations to JSON file.

        Args:
            filename: Output JSON filename
        """
        report = {
            "summary": self.get_summary(),
            "operations": [m.to_dict() for m in self.operations],
        }

        with open(filename, 'w') as f:
            json.dump(report, f, indent=2)

    def reset(self):
        """Reset all metrics."""
        self.operations.clear()
        self.total_operations = 0
        self.total_truncations = 0
        self.total_sentinel_stops = 0
        self.total_corrections = 0
        self.start_time = time.time()
