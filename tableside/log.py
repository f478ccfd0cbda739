"""Structured logging setup shared by the API and the Celery worker"""

import logging

import structlog

from tableside.config import settings

PHONE_FIELDS = ("customer_phone", "phone")


def mask_phone_numbers(logger, method_name, event_dict):
    """Keep only the last four digits of phone numbers in log events"""
    for key in PHONE_FIELDS:
        value = event_dict.get(key)
        if value:
            digits = "".join(ch for ch in str(value) if ch.isdigit())
            event_dict[key] = f"***{digits[-4:]}"
    return event_dict


def configure_logging() -> None:
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            mask_phone_numbers,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
