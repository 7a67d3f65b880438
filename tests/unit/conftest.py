import pytest
from unittest.mock import AsyncMock, MagicMock, patch


@pytest.fixture
def mock_span():
    """Create a mock span instance for testing telemetry."""
    span = MagicMock()
    span.__enter__ = MagicMock(return_value=span)
    span.__exit__ = MagicMock(return_value=None)
    span.__aenter__ = AsyncMock(return_value=span)
    span.__aexit__ = AsyncMock(return_value=None)
    return span


@pytest.fixture
def mock_start_span(mock_span):
    """Create a mock start_span function that returns mock_span."""
    with patch(
        "common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span",
        return_value=mock_span,
    ) as mock:
        yield mock


@pytest.fixture
def failing_user_lookup():
    """Patch the user repository so every lookup raises, as a lost connection would."""
    with patch(
        "packages.users.repositories.user_repository.UserRepository.get",
        new=AsyncMock(side_effect=ConnectionError("connection reset")),
    ) as mock:
        yield mock
