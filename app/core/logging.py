"""
Logging configuration. Console output only; level comes from LOG_LEVEL.
"""

import logging
import logging.config
from typing import Any, Dict, Optional

from app.core.config import settings


def build_logging_config(level: str) -> Dict[str, Any]:
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
        },
        "loggers": {
            "": {"handlers": ["console"], "level": level},
            # SQL echo is controlled on the engine; keep the logger quiet otherwise
            "sqlalchemy.engine": {"level": "WARNING"},
            "uvicorn.access": {"level": "INFO"},
        },
    }


def configure_logging(level: Optional[str] = None) -> None:
    level = level or settings.log_level
    if not hasattr(logging, level.upper()):
        raise ValueError(f"Invalid log level: {level}")
    logging.config.dictConfig(build_logging_config(level))
