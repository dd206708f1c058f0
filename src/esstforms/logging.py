from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

ESSTFORMS_LOG_LEVEL = "ESSTFORMS_LOG_LEVEL"
ESSTFORMS_LOG_JSON = "ESSTFORMS_LOG_JSON"

_LOGGING_CONFIGURED = False


def _env_bool(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # Sheet values are mostly Korean; keep them readable in the log stream.
        return json.dumps(payload, ensure_ascii=False)


def setup_logging() -> None:
    """
    Configure the `esstforms` logger once per process.

    Env vars:
        ESSTFORMS_LOG_LEVEL: DEBUG/INFO/WARNING/... (default INFO)
        ESSTFORMS_LOG_JSON: emit one JSON object per line when truthy
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    level_name = (os.getenv(ESSTFORMS_LOG_LEVEL, "INFO").strip() or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    use_json = _env_bool(ESSTFORMS_LOG_JSON)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(
        _JsonFormatter()
        if use_json
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )

    app_logger = logging.getLogger("esstforms")
    app_logger.handlers.clear()
    app_logger.addHandler(handler)
    app_logger.setLevel(level)
    app_logger.propagate = False

    app_logger.info("Logging configured. level=%s json=%s", level_name, str(use_json).lower())
    _LOGGING_CONFIGURED = True
