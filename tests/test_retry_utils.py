from unittest.mock import MagicMock

import aiohttp
import pytest

from hecubot.retry_utils import RetryConfig, calculate_delay, is_retryable_error, retry_async

FAST = RetryConfig(max_attempts=3, base_delay=0.0, jitter=False)


def _http_error(status):
    return aiohttp.ClientResponseError(request_info=MagicMock(), history=(), status=status, message="")


def test_status_codes_decide_http_errors():
    assert is_retryable_error(_http_error(429), FAST)
    assert is_retryable_error(_http_error(503), FAST)
    assert not is_retryable_error(_http_error(400), FAST)
    assert not is_retryable_error(ValueError("bad"), FAST)
    assert is_retryable_error(ConnectionResetError(), FAST)


def test_delay_grows_and_is_capped():
    config = RetryConfig(base_delay=1.0, max_delay=5.0, exponential_base=2.0, jitter=False)

    assert calculate_delay(0, config) == 1.0
    assert calculate_delay(2, config) == 4.0
    assert calculate_delay(10, config) == 5.0


def test_retry_after_hint_raises_delay():
    config = RetryConfig(base_delay=1.0, max_delay=8.0, jitter=False)

    assert calculate_delay(0, config, retry_after=3.0) == 3.0
    assert calculate_delay(0, config, retry_after=60.0) == 8.0


@pytest.mark.asyncio
async def test_retries_transient_errors_until_success():
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise _http_error(502)
        return "ok"

    assert await retry_async(flaky, FAST) == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_non_retryable_error_raised_immediately():
    attempts = []

    async def rejected():
        attempts.append(1)
        raise _http_error(403)

    with pytest.raises(aiohttp.ClientResponseError):
        await retry_async(rejected, FAST)
    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts():
    attempts = []

    async def down():
        attempts.append(1)
        raise ConnectionError("refused")

    with pytest.raises(ConnectionError):
        await retry_async(down, FAST)
    assert len(attempts) == 3
