"""
Logging configuration with optional JSON output.

Logs go to stderr: stdout is reserved for the MCP stdio protocol.
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict

EXTRA_FIELDS = ("request_id", "operation", "path", "status", "duration_ms", "card_id")


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "service": "kaiten-mcp",
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_obj[field] = getattr(record, field)

        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, ensure_ascii=False)


def configure_logging(level: int | str = logging.INFO, use_json: bool = False) -> None:
    """
    Configure root logging on stderr.
    Pass use_json=True (LOG_JSON in settings) to emit one JSON object per line.
    """
    handler = logging.StreamHandler(sys.stderr)

    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )
