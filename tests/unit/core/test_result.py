import pytest

from common.core.exceptions import InternalError, SubscriptionNotFoundError
from common.core.result import Err, Ok, returns_result


class TestResult:
    def test_ok_unwraps(self):
        result = Ok(5)

        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 5

    def test_err_unwrap_raises_its_error(self):
        error = SubscriptionNotFoundError("Subscription not found")

        with pytest.raises(SubscriptionNotFoundError) as exc_info:
            Err(error).unwrap()

        assert exc_info.value is error


class TestReturnsResult:
    @pytest.mark.asyncio
    async def test_passes_results_through(self):
        @returns_result("Failed")
        async def lookup():
            return Err(SubscriptionNotFoundError("missing"))

        result = await lookup()

        assert isinstance(result.error, SubscriptionNotFoundError)

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_internal_error(self):
        @returns_result("Failed to load")
        async def lookup():
            raise TimeoutError("pool exhausted")

        result = await lookup()

        assert isinstance(result.error, InternalError)
        assert result.error.message == "Failed to load"
        assert isinstance(result.error.cause, TimeoutError)
        assert result.error.status_code == 500
