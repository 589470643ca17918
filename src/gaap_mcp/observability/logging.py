import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

_LOGGING_CONFIGURED = False


class JsonLogFormatter(logging.Formatter):
    _extra_fields = (
        "event_name",
        "tool",
        "tenant_id",
        "correlation_id",
        "request_id",
        "status",
        "error_code",
        "recoverable",
        "latency_ms",
        "endpoint",
        "configured_level",
        "missing",
    )

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in self._extra_fields:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def configure_logging(log_level: str = "INFO") -> None:
    # stdout carries the MCP stream, so everything goes to stderr.
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    root_logger = logging.getLogger()
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        logging.getLogger("gaap.logging").warning(
            "invalid_log_level_fallback",
            extra={
                "event_name": "invalid_log_level_fallback",
                "configured_level": log_level,
            },
        )
        level = logging.INFO

    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonLogFormatter())
    root_logger.handlers = [handler]

    _LOGGING_CONFIGURED = True
