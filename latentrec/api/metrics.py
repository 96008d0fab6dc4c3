"""Metrics service for tracking API performance.

Singleton service that counts calls and latency per operation (request path).
"""

import threading
from typing import Dict


class _OperationStats:
    __slots__ = ("count", "total_ms", "min_ms", "max_ms")

    def __init__(self):
        self.count = 0
        self.total_ms = 0.0
        self.min_ms = float("inf")
        self.max_ms = 0.0

    def add(self, latency_ms: float) -> None:
        self.count += 1
        self.total_ms += latency_ms
        self.min_ms = min(self.min_ms, latency_ms)
        self.max_ms = max(self.max_ms, latency_ms)

    def to_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "average_latency_ms": round(self.total_ms / self.count, 2) if self.count else 0.0,
            "min_latency_ms": round(self.min_ms, 2) if self.count else 0.0,
            "max_latency_ms": round(self.max_ms, 2),
        }


class MetricsService:
    """Thread-safe per-operation call and latency counters."""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._stats_lock = threading.Lock()
        self._stats: Dict[str, _OperationStats] = {}
        self._initialized = True

    def record(self, operation: str, latency_ms: float) -> None:
        """Record one call of an operation with its latency.

        Args:
            operation: Operation name, the request path for API calls
            latency_ms: Latency in milliseconds
        """
        with self._stats_lock:
            stats = self._stats.get(operation)
            if stats is None:
                stats = self._stats[operation] = _OperationStats()
            stats.add(latency_ms)

    def get_metrics(self) -> Dict:
        """Return {"total_calls": int, "operations": {name: stats}}."""
        with self._stats_lock:
            operations = {name: stats.to_dict() for name, stats in self._stats.items()}
        return {
            "total_calls": sum(op["count"] for op in operations.values()),
            "operations": operations,
        }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._stats_lock:
            self._stats.clear()


# Global singleton instance
metrics_service = MetricsService()
