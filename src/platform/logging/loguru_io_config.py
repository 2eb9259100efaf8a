"""
Loguru sinks, log format and stdlib interception for the inventory service

- stdout sink always; hourly rotating file sink when DEBUG
- uvicorn / sqlalchemy / alembic / stripe loggers routed into loguru
- uvicorn access lines get a level derived from the HTTP status
"""

from contextvars import ContextVar
from datetime import datetime, timezone
from enum import StrEnum
import logging
import os
import sys
from typing import TYPE_CHECKING, Optional

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


LOG_DIR = os.environ.get('TEST_LOG_DIR', LOG_DIR)

# Values under these keys are replaced entirely
SENSITIVE_KEYWORDS = frozenset(
    {
        'password',
        'signature',
        'signature_header',
        'stripe_signature',
        'webhook_secret',
        'secret',
    }
)

# Values under these keys keep enough to correlate a customer, nothing more
PII_KEYWORDS = frozenset({'customer_email', 'email'})

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'
    TRACE_ID = 'trace_id'


DEFAULT_EXTRA: dict[str, str] = {
    ExtraField.SERVICE_CONTEXT: get_service_context(),
    ExtraField.CHAIN_START_TIME: '',
    ExtraField.CALL_TARGET: '',
    ExtraField.TRACE_ID: '',
}

INTERCEPTED_LOGGERS = (
    'uvicorn',
    'uvicorn.error',
    'uvicorn.access',
    'fastapi',
    'sqlalchemy.engine',
    'alembic',
    'stripe',
)

# Loggers that are noisy below WARNING regardless of DEBUG
QUIET_LOGGERS = ('aiosqlite', 'asyncio', 'stripe')


def access_log_level(message: str) -> Optional[str]:
    """
    Level for a uvicorn access line, from its status code.

    Format: '127.0.0.1:51234 - "POST /api/webhooks/stripe HTTP/1.1" 400'
    """
    if ' HTTP/' not in message:
        return None
    tail = message.rsplit('"', 1)[-1].split()
    if not tail or not tail[0].isdigit():
        return None

    status_code = int(tail[0])
    if status_code >= 500:
        return 'CRITICAL'
    if status_code >= 400:
        # 409 is a rejected sale, an expected outcome
        return 'WARNING' if status_code == 409 else 'ERROR'
    if status_code >= 300:
        return 'INFO'
    return 'SUCCESS'


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping the original caller location"""

    def __init__(self, bound_logger: 'LoguruLogger') -> None:
        super().__init__()
        self._bound_logger = bound_logger

    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()

        level: str | int | None = access_log_level(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        self._bound_logger.opt(depth=depth, exception=record.exc_info).log(level, message)


io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
        f'<lk>{{extra[{ExtraField.TRACE_ID}]}}</>',
    )
)


def _log_file_path() -> str:
    hour = datetime.now(timezone.utc).strftime('%Y-%m-%d_%H')
    prefix = 'test_' if os.environ.get('TEST_LOG_DIR') else ''
    return f'{LOG_DIR}/{prefix}{hour}.log'


def _configure_sinks(bound_logger: 'LoguruLogger', *, level: str) -> None:
    bound_logger.add(sys.stdout, format=io_log_format, level=level, enqueue=True)
    if settings.DEBUG:
        bound_logger.add(
            _log_file_path(),
            format=io_log_format,
            rotation='1 hour',
            retention='7 days',
            compression='gz',
            enqueue=True,
            level=level,
        )


def _intercept_stdlib(bound_logger: 'LoguruLogger') -> None:
    handler = InterceptHandler(bound_logger)
    logging.basicConfig(handlers=[handler], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if settings.DB_ECHO:
        logging.getLogger('sqlalchemy.engine').setLevel(logging.INFO)


loguru_logger.remove()
custom_logger = loguru_logger.bind(**DEFAULT_EXTRA)
min_log_level = 'DEBUG' if settings.DEBUG else 'INFO'

_configure_sinks(custom_logger, level=min_log_level)
_intercept_stdlib(custom_logger)
