"""In-process metrics for store operations, exported as a JSON snapshot or Prometheus text.

Operations are keyed by ``(component, operation)`` and exported with labels
rather than folded into the metric name, so one series family covers every
store call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock

METRIC_PREFIX = "skill_registry"

LabelSet = tuple[tuple[str, str], ...]


@dataclass
class OperationStats:
    success: int = 0
    failed: int = 0
    sum_ms: float = 0.0
    max_ms: float = 0.0

    @property
    def total(self) -> int:
        return self.success + self.failed

    @property
    def avg_ms(self) -> float:
        return self.sum_ms / self.total if self.total else 0.0


def _escape_label(value: str) -> str:
    return str(value).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _format_labels(labels: LabelSet) -> str:
    if not labels:
        return ""
    return "{" + ",".join(f'{key}="{_escape_label(value)}"' for key, value in labels) + "}"


class ObservabilityMetricsService:
    def __init__(self) -> None:
        self._lock = Lock()
        self._operations: dict[tuple[str, str], OperationStats] = {}
        self._counters: dict[tuple[str, LabelSet], int] = {}

    def record(self, *, component: str, operation: str, success: bool, latency_ms: float) -> None:
        latency_ms = float(latency_ms)
        with self._lock:
            stats = self._operations.setdefault((component, operation), OperationStats())
            if success:
                stats.success += 1
            else:
                stats.failed += 1
            stats.sum_ms += latency_ms
            stats.max_ms = max(stats.max_ms, latency_ms)

    def increment(self, metric_name: str, value: int = 1, **labels: str) -> None:
        key = (metric_name, tuple(sorted((name, str(label)) for name, label in labels.items())))
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + int(value)

    def reset(self) -> None:
        with self._lock:
            self._operations.clear()
            self._counters.clear()

    def snapshot(self) -> dict:
        with self._lock:
            operations = {
                f"{component}.{operation}": {
                    "total": stats.total,
                    "success": stats.success,
                    "failed": stats.failed,
                    "avg_ms": stats.avg_ms,
                    "max_ms": stats.max_ms,
                }
                for (component, operation), stats in sorted(self._operations.items())
            }
            counters = [
                {"name": name, "labels": dict(labels), "value": value}
                for (name, labels), value in sorted(self._counters.items())
            ]
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "operations": operations,
            "counters": counters,
        }

    def to_prometheus(self) -> str:
        with self._lock:
            operations = sorted(self._operations.items())
            counters = sorted(self._counters.items())

        lines = [
            f"# HELP {METRIC_PREFIX}_up Observability exporter availability",
            f"# TYPE {METRIC_PREFIX}_up gauge",
            f"{METRIC_PREFIX}_up 1",
        ]

        if operations:
            total = f"{METRIC_PREFIX}_operations_total"
            latency = f"{METRIC_PREFIX}_operation_latency_ms"
            lines.append(f"# HELP {total} Store operations by outcome")
            lines.append(f"# TYPE {total} counter")
            for (component, operation), stats in operations:
                for outcome, count in (("success", stats.success), ("failed", stats.failed)):
                    labels = _format_labels((("component", component), ("operation", operation), ("outcome", outcome)))
                    lines.append(f"{total}{labels} {count}")

            lines.append(f"# HELP {latency} Store operation latency in milliseconds")
            lines.append(f"# TYPE {latency} summary")
            for (component, operation), stats in operations:
                labels = _format_labels((("component", component), ("operation", operation)))
                lines.append(f"{latency}_count{labels} {stats.total}")
                lines.append(f"{latency}_sum{labels} {stats.sum_ms:.6f}")

            lines.append(f"# TYPE {latency}_max gauge")
            for (component, operation), stats in operations:
                labels = _format_labels((("component", component), ("operation", operation)))
                lines.append(f"{latency}_max{labels} {stats.max_ms:.6f}")

        declared: set[str] = set()
        for (name, labels), value in counters:
            metric = f"{METRIC_PREFIX}_{name}_total"
            if metric not in declared:
                lines.append(f"# TYPE {metric} counter")
                declared.add(metric)
            lines.append(f"{metric}{_format_labels(labels)} {value}")

        return "\n".join(lines) + "\n"


observability_metrics_service = ObservabilityMetricsService()
