import asyncio
import time
from logging import WARNING, getLogger
from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from ._base import RecoveryContext, RecoveryHandler
from ._headers import get_retry_after

logger = getLogger("restbound")


def is_retryable_status_code(response: httpx.Response) -> bool:
    return response.status_code >= 500 and response.status_code < 600


def _sleep(seconds: float) -> None:
    time.sleep(seconds)


async def _sleep_async(seconds: float) -> None:
    await asyncio.sleep(seconds)


class ThrottleRecoveryHandler(RecoveryHandler):
    """Waits out a 429 response, then resends the request once.

    The wait is the ``Retry-After`` header. Without one, an exponential
    backoff based on the recovery attempt is used.

    Args:
        max_wait: Longest wait in seconds this handler accepts. A longer
            ``Retry-After`` leaves the 429 response in place, so it is mapped
            to a ``ThrottlingError``.
        multiplier: Multiplier of the fallback exponential backoff.
        max_backoff: Upper bound of the fallback exponential backoff.
    """

    def __init__(
        self,
        max_wait: Optional[float] = None,
        multiplier: float = 1,
        max_backoff: float = 60,
    ) -> None:
        self.max_wait = max_wait
        self._backoff = wait_exponential(multiplier=multiplier, min=1, max=max_backoff)

    def can_handle(self, response: httpx.Response) -> bool:
        return response.status_code == 429

    def get_wait(self, context: RecoveryContext) -> float:
        retry_after = get_retry_after(context.response.headers)
        if retry_after > 0:
            return float(retry_after)

        state = RetryCallState(None, None, (), {})
        state.attempt_number = context.attempt
        return self._backoff(state)

    def _should_wait(self, wait: float) -> bool:
        if self.max_wait is not None and wait > self.max_wait:
            logger.warning(
                f"Rate limited (429). Retry-After of {wait:.2f}s exceeds the "
                f"{self.max_wait:.2f}s limit; giving up"
            )
            return False
        logger.warning(f"Rate limited (429). Retrying after {wait:.2f}s")
        return True

    def recover(self, context: RecoveryContext) -> httpx.Response:
        wait = self.get_wait(context)
        if not self._should_wait(wait):
            return context.response

        context.response.close()
        time.sleep(wait)
        return context.resend()

    async def recover_async(self, context: RecoveryContext) -> httpx.Response:
        wait = self.get_wait(context)
        if not self._should_wait(wait):
            return context.response

        await context.response.aclose()
        await asyncio.sleep(wait)
        return await context.resend_async()


class ServerErrorRecoveryHandler(RecoveryHandler):
    """Resends a request that failed with a 5xx status.

    Retries use exponential backoff and stop after ``max_retries`` resends;
    the last response is returned whatever its status. Transport errors raised
    while resending propagate unchanged.
    """

    MAX_RETRIES = 3

    def __init__(
        self,
        max_retries: int = MAX_RETRIES,
        multiplier: float = 1,
        max_backoff: float = 10,
    ) -> None:
        self.max_retries = max_retries
        self.multiplier = multiplier
        self.max_backoff = max_backoff

    def can_handle(self, response: httpx.Response) -> bool:
        return is_retryable_status_code(response)

    def _retry_kwargs(self) -> dict:
        return {
            "retry": retry_if_result(is_retryable_status_code),
            "wait": wait_exponential(
                multiplier=self.multiplier, min=1, max=self.max_backoff
            ),
            # the first attempt returns the failed response
            "stop": stop_after_attempt(self.max_retries + 1),
            "retry_error_callback": lambda state: state.outcome.result(),
            "before_sleep": before_sleep_log(logger, WARNING),
        }

    def recover(self, context: RecoveryContext) -> httpx.Response:
        responses = iter((context.response,))

        def attempt() -> httpx.Response:
            response = next(responses, None)
            return response if response is not None else context.resend()

        return Retrying(sleep=_sleep, **self._retry_kwargs())(attempt)

    async def recover_async(self, context: RecoveryContext) -> httpx.Response:
        responses = iter((context.response,))

        async def attempt() -> httpx.Response:
            response = next(responses, None)
            if response is not None:
                return response
            return await context.resend_async()

        return await AsyncRetrying(sleep=_sleep_async, **self._retry_kwargs())(
            attempt
        )
