"""Logging configuration for the FastAPI application.

Log records are written as one JSON object per line so that the context
passed through ``extra=`` (user ids, counts, timings) stays machine readable.
"""

import json
import logging
import os
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from latentrec.api.metrics import metrics_service

LOG_LEVEL_ENV = "LATENTREC_LOG_LEVEL"

request_logger = logging.getLogger("latentrec.api.requests")

# Attributes every LogRecord has; anything else came in through ``extra=``
_STANDARD_ATTRS = set(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Format log records as JSON, carrying over extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(log_level: Optional[str] = None) -> None:
    """Install the JSON formatter on the root logger.

    Args:
        log_level: Level name such as DEBUG or INFO. Defaults to the
            LATENTREC_LOG_LEVEL environment variable, then INFO.
    """
    level_name = (log_level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # uvicorn's own access log duplicates the middleware lines
    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration.

    The generated request id is returned in the X-Request-ID header, and the
    duration is recorded in the metrics service under the request path.
    """

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        path = str(request.url.path)
        context = {
            "request_id": str(uuid.uuid4()),
            "method": request.method,
            "path": path,
        }
        start_time = time.perf_counter()

        request_logger.info(
            "Incoming request",
            extra=dict(context, client_host=request.client.host if request.client else None),
        )

        try:
            response = await call_next(request)
        except Exception as e:
            request_logger.error(
                "Request failed",
                extra=dict(
                    context,
                    error=str(e),
                    error_type=type(e).__name__,
                    duration_ms=_elapsed_ms(start_time),
                ),
                exc_info=True,
            )
            raise

        duration_ms = _elapsed_ms(start_time)
        metrics_service.record(path, duration_ms)
        request_logger.info(
            "Request completed",
            extra=dict(context, status_code=response.status_code, duration_ms=duration_ms),
        )

        response.headers["X-Request-ID"] = context["request_id"]
        return response


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)
