from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
import logging
from threading import Lock
from typing import Any

from skill_registry.core.config import settings
from skill_registry.services.observability_metrics_service import observability_metrics_service

logger = logging.getLogger("skill_registry.alerts")


class AlertingService:
    def __init__(self, buffer_size: int | None = None) -> None:
        self._buffer_size = max(10, int(buffer_size or settings.OBS_ALERT_BUFFER_SIZE))
        self._lock = Lock()
        self._items: deque[dict[str, Any]] = deque(maxlen=self._buffer_size)

    def emit(self, *, component: str, message: str, severity: str = "warning", details: dict | None = None) -> None:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "component": str(component),
            "severity": str(severity),
            "message": str(message),
            "details": details or {},
        }
        with self._lock:
            self._items.appendleft(payload)

        observability_metrics_service.increment("alerts", component=component, severity=severity)
        log_context = {"context": payload}
        if severity.lower() == "critical":
            logger.error("alert emitted", extra=log_context)
        else:
            logger.warning("alert emitted", extra=log_context)

    def list_alerts(self, limit: int = 50) -> list[dict[str, Any]]:
        count = max(1, min(limit, self._buffer_size))
        with self._lock:
            return list(self._items)[:count]


alerting_service = AlertingService()
