"""
Retry policy for store operations

- Only transient failures are retried (dropped connections, pool timeouts,
  lock timeouts surfaced as OperationalError)
- Exponential backoff: base_delay, doubled per attempt, capped at max_delay
- An operation without an idempotency key runs exactly once; replaying it
  could apply the same effect twice
- Exhaustion surfaces as StoreUnavailableError (HTTP 503)
"""

import time
from typing import Awaitable, Callable, Optional, TypeVar

import anyio
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import StoreUnavailableError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.inventory_metrics import metrics


_T = TypeVar('_T')


def is_transient_store_error(exc: BaseException) -> bool:
    if isinstance(exc, (OperationalError, InterfaceError, PoolTimeoutError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, (TimeoutError, ConnectionError))


class RetryPolicy:
    def __init__(
        self,
        *,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
    ) -> None:
        self.max_attempts = max(1, max_attempts or settings.STORE_RETRY_MAX_ATTEMPTS)
        self.base_delay = settings.STORE_RETRY_BASE_DELAY if base_delay is None else base_delay
        self.max_delay = settings.STORE_RETRY_MAX_DELAY if max_delay is None else max_delay

    def backoff(self, attempt: int) -> float:
        """Delay before attempt ``attempt + 1`` (attempt is 1-based)"""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    async def run(
        self,
        operation: Callable[[], Awaitable[_T]],
        *,
        idempotent: bool,
        operation_name: str,
    ) -> _T:
        """
        Run ``operation`` under the policy.

        ``operation`` is a zero-argument coroutine factory: every attempt must
        open its own unit of work so a retry never reuses a broken transaction.
        """
        attempts = self.max_attempts if idempotent else 1
        start = time.perf_counter()

        for attempt in range(1, attempts + 1):
            try:
                result = await operation()
                metrics.observe_store_operation(
                    operation=operation_name, duration=time.perf_counter() - start
                )
                return result
            except Exception as e:
                if not is_transient_store_error(e):
                    raise

                if attempt >= attempts:
                    Logger.base.error(
                        f'[RETRY] {operation_name} failed after {attempt} attempt(s): '
                        f'{type(e).__name__}: {e}'
                    )
                    metrics.record_store_unavailable(operation=operation_name)
                    raise StoreUnavailableError() from e

                delay = self.backoff(attempt)
                Logger.base.warning(
                    f'[RETRY] {operation_name} {attempt}/{attempts}: '
                    f'{type(e).__name__}, retry in {delay:.3f}s'
                )
                metrics.record_store_retry(operation=operation_name)
                await anyio.sleep(delay)

        raise StoreUnavailableError()  # unreachable
