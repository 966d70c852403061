"""
JSON structured logging configuration using python-json-logger
"""
import logging
import logging.config
import sys
from typing import Dict, Any

from pythonjsonlogger.json import JsonFormatter

from resolve.config import get_settings


logger = logging.getLogger("resolve")

# Extras attached by sessions, the dashboard pipeline and complaint services
CONTEXT_FIELDS = ("user_id", "complaint_id")

# Client libraries that log every request or heartbeat at INFO
NOISY_LOGGERS = ("httpx", "hpack", "realtime", "websockets")


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter tagging each record with the service and its context"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record['service'] = 'brototype-resolve'
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)


def setup_logging() -> None:
    """Setup JSON structured logging"""
    settings = get_settings()

    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {
                '()': CustomJsonFormatter,
                'format': '%(asctime)s %(name)s %(levelname)s %(message)s',
                # notification texts carry emoji
                'json_ensure_ascii': False,
            },
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': settings.LOG_LEVEL,
                'formatter': 'json' if settings.ENVIRONMENT == 'production' else 'standard',
                'stream': sys.stdout
            }
        },
        'loggers': {
            'resolve': {
                'level': settings.LOG_LEVEL,
                'handlers': ['console'],
                'propagate': False
            },
            'uvicorn': {
                'level': 'INFO',
                'handlers': ['console'],
                'propagate': False
            },
            **{name: {'level': 'WARNING'} for name in NOISY_LOGGERS},
        },
        'root': {
            'level': settings.LOG_LEVEL,
            'handlers': ['console']
        }
    }

    logging.config.dictConfig(config)
