from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from skill_registry.core.config import settings

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            payload.update(context)

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(json_output: bool | None = None) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    use_json = settings.OBS_LOG_JSON if json_output is None else json_output
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if use_json else logging.Formatter(PLAIN_FORMAT))

    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(handler)
