# rentdesk/config/logging.py

import json
import logging
from datetime import datetime, timezone

from rentdesk.core.context import company_id_ctx, correlation_id_ctx, user_id_ctx

# Attributes every LogRecord carries; anything else came in through extra=.
_RESERVED = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "correlation_id": correlation_id_ctx.get(),
            "user_id": user_id_ctx.get(),
            "company_id": company_id_ctx.get(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and log_record.get(key) is None:
                log_record[key] = value
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


def configure_logging(log_level: str):
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)
