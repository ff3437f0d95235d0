"""Tests for retry utilities."""

import asyncio

import pytest
from product_resolver.exceptions import CatalogFetchError, ProductNotFoundError
from product_resolver.retry import RetryConfig, retry_with_backoff


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_default_config(self):
        """Test default retry configuration."""
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.base_delay == 0.5
        assert config.max_delay == 10.0

    def test_at_least_one_attempt(self):
        """Test max_attempts is never below one."""
        assert RetryConfig(max_attempts=0).max_attempts == 1

    def test_calculate_delay_exponential(self):
        """Test exponential backoff calculation."""
        config = RetryConfig(base_delay=1.0, exponential_base=2.0, jitter=False)

        assert config.calculate_delay(0) == 1.0
        assert config.calculate_delay(1) == 2.0
        assert config.calculate_delay(2) == 4.0

    def test_calculate_delay_max_cap(self):
        """Test delay is capped at max_delay."""
        config = RetryConfig(base_delay=10.0, max_delay=30.0, jitter=False)

        assert config.calculate_delay(5) == 30.0

    def test_calculate_delay_jitter(self):
        """Test jitter adds randomness."""
        config = RetryConfig(base_delay=1.0, jitter=True, jitter_range=(0.5, 1.5))

        delays = [config.calculate_delay(0) for _ in range(10)]
        assert not all(d == delays[0] for d in delays)

    def test_resolver_errors_respect_retryable_flag(self):
        """Test final resolver errors are not retried."""
        config = RetryConfig()

        assert config.is_retryable(CatalogFetchError(message="x", url="http://x"))
        assert not config.is_retryable(ProductNotFoundError(message="x", product_id="1"))


class TestRetryWithBackoff:
    """Tests for retry_with_backoff decorator."""

    def test_success_no_retry(self):
        """Test successful call doesn't retry."""
        call_count = 0

        @retry_with_backoff(max_attempts=3, base_delay=0.01)
        def successful_func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = successful_func()
        assert result == "success"
        assert call_count == 1

    def test_retry_on_exception(self):
        """Test retry on exception."""
        call_count = 0

        @retry_with_backoff(max_attempts=3, base_delay=0.01)
        def failing_then_success():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ValueError("Temporary failure")
            return "success"

        result = failing_then_success()
        assert result == "success"
        assert call_count == 3

    def test_max_retries_exceeded(self):
        """Test exception raised after max retries."""
        call_count = 0

        @retry_with_backoff(max_attempts=3, base_delay=0.01)
        def always_failing():
            nonlocal call_count
            call_count += 1
            raise ValueError("Always fails")

        with pytest.raises(ValueError, match="Always fails"):
            always_failing()

        assert call_count == 3

    def test_non_retryable_exception(self):
        """Test non-retryable exceptions aren't retried."""
        call_count = 0

        config = RetryConfig(
            max_attempts=3,
            base_delay=0.01,
            non_retryable_exceptions=(TypeError,),
            retryable_exceptions=(Exception,),
        )

        @retry_with_backoff(config=config)
        def raises_type_error():
            nonlocal call_count
            call_count += 1
            raise TypeError("Non-retryable")

        with pytest.raises(TypeError):
            raises_type_error()

        assert call_count == 1

    def test_on_retry_callback(self):
        """Test on_retry callback is called."""
        retries = []

        def on_retry(exc, attempt):
            retries.append((str(exc), attempt))

        call_count = 0

        @retry_with_backoff(max_attempts=3, base_delay=0.01, on_retry=on_retry)
        def failing_twice():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ValueError(f"Attempt {call_count}")
            return "success"

        result = failing_twice()
        assert result == "success"
        assert retries == [("Attempt 1", 1), ("Attempt 2", 2)]


class TestAsyncRetry:
    """Tests for retrying coroutine functions."""

    def test_async_retry_then_success(self):
        """Test coroutines are retried and awaited."""
        call_count = 0

        @retry_with_backoff(max_attempts=3, base_delay=0.01)
        async def flaky():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise CatalogFetchError(message="503", url="http://x", status_code=503)
            return "ok"

        assert asyncio.run(flaky()) == "ok"
        assert call_count == 2

    def test_async_final_error_not_retried(self):
        """Test a non-retryable resolver error stops immediately."""
        call_count = 0

        @retry_with_backoff(max_attempts=3, base_delay=0.01)
        async def missing():
            nonlocal call_count
            call_count += 1
            raise ProductNotFoundError(message="gone", product_id="1")

        with pytest.raises(ProductNotFoundError):
            asyncio.run(missing())

        assert call_count == 1

    def test_async_cancellation_not_retried(self):
        """Test cancelling a retried coroutine stops it at once."""
        call_count = 0

        @retry_with_backoff(config=RetryConfig(max_attempts=5, base_delay=10.0, jitter=False))
        async def slow_failure():
            nonlocal call_count
            call_count += 1
            raise ValueError("fail")

        async def scenario():
            task = asyncio.create_task(slow_failure())
            await asyncio.sleep(0)
            task.cancel()
            await asyncio.wait([task])
            return task

        task = asyncio.run(scenario())

        assert task.cancelled()
        assert call_count == 1
