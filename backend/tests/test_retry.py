"""Unit tests for the generic retry-with-backoff combinator."""

from unittest.mock import AsyncMock, call, patch

import pytest

from services.retry import exponential_backoff, retry_with_backoff


class RateLimited(Exception):
    pass


def only_rate_limits(error: BaseException) -> bool:
    return isinstance(error, RateLimited)


def test_exponential_backoff_is_capped() -> None:
    assert [exponential_backoff(attempt) for attempt in range(6)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]


@pytest.mark.asyncio
async def test_retries_rate_limits_then_succeeds() -> None:
    func = AsyncMock(side_effect=[RateLimited("429"), RateLimited("429"), "done"])

    with patch("services.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        result = await retry_with_backoff(func, is_retryable=only_rate_limits, max_attempts=3)

    assert result == "done"
    assert func.await_count == 3
    assert sleep.await_args_list == [call(1.0), call(2.0)]


@pytest.mark.asyncio
async def test_non_retryable_error_propagates_immediately() -> None:
    func = AsyncMock(side_effect=ValueError("bad request"))

    with patch("services.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        with pytest.raises(ValueError, match="bad request"):
            await retry_with_backoff(func, is_retryable=only_rate_limits, max_attempts=3)

    assert func.await_count == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_exhausted_retries_raise_last_error() -> None:
    func = AsyncMock(side_effect=RateLimited("still limited"))

    with patch("services.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        with pytest.raises(RateLimited, match="still limited"):
            await retry_with_backoff(func, is_retryable=only_rate_limits, max_attempts=3)

    assert func.await_count == 3
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_custom_delay_policy() -> None:
    func = AsyncMock(side_effect=[RateLimited(), "ok"])

    with patch("services.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        await retry_with_backoff(func, is_retryable=only_rate_limits, delay=lambda attempt: 0.25)

    sleep.assert_awaited_once_with(0.25)
