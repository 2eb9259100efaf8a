"""
``Logger.io``: argument / return / exception logging for use cases, repositories and controllers

    @Logger.io
    async def execute(self, *, event_id: UUID) -> ...

    @Logger.io(truncate_content=True)   # raw webhook bodies are logged by size only

Arguments and return values are logged at DEBUG (skipped entirely otherwise),
masked by key (secrets, signatures) and by pattern (e-mail addresses). An
exception travelling through several decorated layers is logged once, at the
innermost one; CustomBaseError is an expected outcome and logged without a
traceback.
"""

from contextlib import contextmanager
from functools import wraps
from inspect import iscoroutinefunction
import types
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Iterator,
    ParamSpec,
    TypeVar,
    cast,
    overload,
)


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io_config import ExtraField, custom_logger
from src.platform.logging.loguru_io_utils import (
    build_call_target_func_path,
    current_trace_id,
    enter_call,
    exit_call,
    get_chain_start_time,
    mask_by_key,
    mask_sensitive,
    normalize_args_kwargs,
    truncate_content,
)

_F = TypeVar('_F', bound=Callable[..., Any])
_P = ParamSpec('_P')
_T = TypeVar('_T')


class LoguruIO:
    # wrapper frame + scope frame
    depth = 3

    def __init__(
        self, custom_logger: 'LoguruLogger', *, reraise: bool = True, truncate_content: bool = False
    ) -> None:
        self._custom_logger = custom_logger
        self.reraise = reraise
        self.truncate_content = truncate_content
        self.call_target = ''

    def _bound(self) -> 'LoguruLogger':
        return self._custom_logger.bind(
            **{
                ExtraField.CALL_TARGET: self.call_target,
                ExtraField.CHAIN_START_TIME: get_chain_start_time(),
                ExtraField.TRACE_ID: current_trace_id(),
            }
        )

    def render(self, data: Any) -> Any:
        if isinstance(data, dict):
            rendered: Any = {
                key: self.render(mask_by_key(key, value)) for key, value in data.items()
            }
        elif isinstance(data, (list, tuple)):
            rendered = type(data)(self.render(item) for item in data)
        else:
            rendered = mask_sensitive(data)
        return truncate_content(rendered) if self.truncate_content else rendered

    def log_exception(self, e: Exception) -> None:
        if getattr(e, '_has_logged', False):
            return
        try:
            e._has_logged = True  # type: ignore[attr-defined]
        except AttributeError:
            pass

        bound = self._bound().opt(depth=self.depth)
        if isinstance(e, CustomBaseError):
            bound.warning(f'{type(e).__name__}({e.status_code}): {e.message}')
        else:
            bound.exception(f'{type(e).__name__}: {e}')

    @contextmanager
    def scope(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Iterator[list[Any]]:
        """Log the call on entry, the result on exit; the caller appends the result"""
        enter_call()
        result: list[Any] = []
        try:
            if settings.DEBUG:
                self._bound().opt(depth=self.depth).debug(
                    f'args: {self.render(args)}, kwargs: {self.render(kwargs)}'
                )
            yield result
            if settings.DEBUG and result:
                self._bound().opt(depth=self.depth).debug(f'return: {self.render(result[0])}')
        except Exception as e:
            self.log_exception(e)
            raise
        finally:
            exit_call()

    def _hide_from_traceback(self, func: Callable[..., Any]) -> Callable[..., Any]:
        func.__code__ = func.__code__.replace(  # type: ignore[attr-defined]
            co_filename=cast(types.FunctionType, self._custom_logger.catch).__code__.co_filename
        )
        return func

    def __call__(self, func: _F) -> _F:
        self.call_target = build_call_target_func_path(func)

        if iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    with self.scope(args, kwargs) as result:
                        args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                        result.append(await func(*args, **kwargs))
                    return result[0]
                except Exception:
                    if self.reraise:
                        raise
                    return None

            return cast(_F, self._hide_from_traceback(async_wrapper))

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                with self.scope(args, kwargs) as result:
                    args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                    result.append(func(*args, **kwargs))
                return result[0]
            except Exception:
                if self.reraise:
                    raise
                return None

        return cast(_F, self._hide_from_traceback(sync_wrapper))


class Logger:
    base = custom_logger

    @overload
    @staticmethod
    def io(func: Callable[_P, _T]) -> Callable[_P, _T]: ...

    @overload
    @staticmethod
    def io(func: None = ..., *, reraise: bool = ..., truncate_content: bool = ...) -> LoguruIO: ...

    @staticmethod
    def io(
        func: Callable[_P, _T] | None = None, *, reraise: bool = True, truncate_content: bool = True
    ) -> Callable[_P, _T] | LoguruIO:
        decorator = LoguruIO(
            custom_logger=custom_logger, reraise=reraise, truncate_content=truncate_content
        )
        return decorator(func) if func else decorator
