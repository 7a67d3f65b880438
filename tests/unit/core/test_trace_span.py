import pytest
from unittest.mock import patch

from common.core.exceptions import SubscriptionNotFoundError
from common.core.otel_axiom_exporter import trace_span
from common.core.result import Err, Ok


class Lookup:
    @trace_span
    async def find(self, found: bool):
        return Ok(1) if found else Err(SubscriptionNotFoundError("No subscription"))

    @trace_span
    def count(self) -> int:
        return 3


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
class TestTraceSpan:
    @pytest.mark.asyncio
    async def test_span_named_after_class_and_method(self, mock_start_span):
        await Lookup().find(True)

        mock_start_span.assert_called_once_with("Lookup.find")

    @pytest.mark.asyncio
    async def test_err_result_marks_span_failed(self, mock_start_span):
        span = mock_start_span.return_value.__enter__.return_value

        result = await Lookup().find(False)

        assert result.is_err()
        span.set_attribute.assert_called_once_with(
            "app.error_code", SubscriptionNotFoundError.code
        )
        span.set_status.assert_called_once()

    @pytest.mark.asyncio
    async def test_ok_result_leaves_span_alone(self, mock_start_span):
        span = mock_start_span.return_value.__enter__.return_value

        await Lookup().find(True)

        span.set_status.assert_not_called()

    def test_sync_function(self, mock_start_span):
        assert Lookup().count() == 3
        mock_start_span.assert_called_once_with("Lookup.count")
