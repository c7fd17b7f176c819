"""
Logging setup for adapter deploys: plain text for humans, JSON for CI log sinks.
"""

import json
import logging
import sys
import time
from typing import Any, Dict, MutableMapping, Tuple

CONTEXT_FIELDS = ("adapter_dir", "adapter_id", "version", "object_key", "cwd")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Custom formatter that outputs logs as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""

        payload = {
            "ts": int(time.time() * 1000),  # Unix timestamp in milliseconds
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "funcName": record.funcName,
            "lineno": record.lineno,
        }

        for attr in CONTEXT_FIELDS:
            if hasattr(record, attr):
                payload[attr] = getattr(record, attr)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: int = logging.INFO, fmt: str = "text") -> None:
    """Configure the root logger for text or JSON output on stderr."""

    if fmt not in ("text", "json"):
        raise ValueError(f"unknown log format: {fmt}")

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    # botocore is chatty at INFO
    for noisy in ("botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


class AdapterLogAdapter(logging.LoggerAdapter):
    """Attaches the adapter being processed to every record."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def adapter_logger(logger: logging.Logger, **context: Any) -> AdapterLogAdapter:
    """Wrap ``logger`` so records carry adapter context fields."""
    extra: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}
    return AdapterLogAdapter(logger, extra)
