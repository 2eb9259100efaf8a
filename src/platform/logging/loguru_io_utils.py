from inspect import FullArgSpec, getfile, getfullargspec, getsourcelines
from os.path import basename
import re
from time import time
from typing import Any, Callable

from opentelemetry import trace

from src.platform.logging.loguru_io_config import (
    PII_KEYWORDS,
    SENSITIVE_KEYWORDS,
    call_depth_var,
    chain_start_time_var,
)


MAX_CONTENT_LENGTH = 500
MASK = '********'

_SENSITIVE_PATTERN = re.compile(
    r"(\b(?:{keys})\b)(\s*[=:]\s*)(['\"]?)[^,'\"\s)}}]+(['\"]?)".format(
        keys='|'.join(sorted(SENSITIVE_KEYWORDS))
    ),
    flags=re.IGNORECASE,
)
_EMAIL_PATTERN = re.compile(
    r'\b([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*(@[A-Za-z0-9.-]+\.[A-Za-z]{2,})\b'
)


def get_chain_start_time() -> float:
    """Start of the outermost decorated call in this context"""
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def enter_call() -> None:
    call_depth_var.set(call_depth_var.get() + 1)


def exit_call() -> None:
    layer = call_depth_var.get() - 1
    call_depth_var.set(layer)
    if not layer:
        chain_start_time_var.set(0)


def current_trace_id() -> str:
    span_context = trace.get_current_span().get_span_context()
    return format(span_context.trace_id, '032x') if span_context.is_valid else ''


def build_call_target_func_path(func: Callable[..., Any]) -> str:
    target = getattr(func, '__func__', func)
    try:
        lineno = getsourcelines(target)[1]
    except (OSError, TypeError):
        lineno = 0
    return f'{basename(getfile(target))}::{func.__qualname__}:{lineno}'


def normalize_args_kwargs(
    func: Callable[..., Any], *args: Any, **kwargs: Any
) -> tuple[tuple[Any, ...], dict[Any, Any]]:
    """Drop kwargs / surplus positionals the wrapped function would not accept"""
    func = getattr(func, '__wrapped__', func)
    arg_spec: FullArgSpec = getfullargspec(func)

    if not arg_spec.varkw:
        accepted = set(arg_spec.args) | set(arg_spec.kwonlyargs)
        kwargs = {k: v for k, v in kwargs.items() if k in accepted}

    if not arg_spec.varargs:
        positional = [name for name in arg_spec.args if name not in kwargs]
        if not positional:
            args = ()
        elif len(args) > len(positional):
            args = args[: len(positional)]

    return args, kwargs


def mask_email(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return _EMAIL_PATTERN.sub(r'\1***\2', value)


def mask_sensitive(data: Any) -> Any:
    """Mask ``key=value`` / ``key: value`` pairs and e-mail addresses inside a repr"""
    data_str = str(data)
    masked = _EMAIL_PATTERN.sub(r'\1***\2', _SENSITIVE_PATTERN.sub(rf'\1\2\3{MASK}\4', data_str))
    return data if data_str == masked else masked


def mask_by_key(keyword: Any, value: Any) -> Any:
    key = str(keyword).lower()
    if key in SENSITIVE_KEYWORDS:
        return MASK
    if key in PII_KEYWORDS:
        return mask_email(value)
    return value


def truncate_content(data: Any) -> Any:
    if isinstance(data, (bytes, bytearray)):
        # Raw webhook payloads are signed bodies; log their size only
        return f'<{len(data)} bytes>'
    if isinstance(data, str) and len(data) > MAX_CONTENT_LENGTH:
        return f'{data[:MAX_CONTENT_LENGTH]}... ({len(data)} chars)'
    return data
