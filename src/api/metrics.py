"""Metrics service for the assistant and recommendation endpoints.

Counts handled messages per intent and tracks latency of replies and
recommendation calls.
"""

import threading
from collections import Counter
from typing import Dict


class _Latency:
    """Running count, total, min and max of latency samples."""

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

    def summary(self) -> Dict:
        average = self.total_ms / self.count if self.count > 0 else 0.0
        return {
            "count": self.count,
            "average_latency_ms": round(average, 2),
            "min_latency_ms": round(self.min_ms, 2) if self.count > 0 else 0.0,
            "max_latency_ms": round(self.max_ms, 2),
        }


class MetricsService:
    """Thread-safe counters for one application instance."""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def record_message(self, intent: str, latency_ms: float) -> None:
        """Record a handled chat message.

        Args:
            intent: Name of the intent that produced the reply
            latency_ms: Latency in milliseconds
        """
        with self._lock:
            self._intents[intent] += 1
            self._messages.add(latency_ms)

    def record_recommendation(self, latency_ms: float) -> None:
        with self._lock:
            self._recommendations.add(latency_ms)

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with:
            - messages: latency summary of chat replies
            - intents: handled message count per intent
            - recommendations: latency summary of recommendation calls
        """
        with self._lock:
            return {
                "messages": self._messages.summary(),
                "intents": dict(self._intents),
                "recommendations": self._recommendations.summary(),
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._intents: Counter = Counter()
            self._messages = _Latency()
            self._recommendations = _Latency()
