import pytest
from unittest.mock import patch

from common.core.exceptions import (
    AdminPermissionRequiredError,
    UserInactiveError,
    UserNotFoundError,
)
from packages.auth.services.admin_guard import AdminGuard


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
class TestAdminGuard:
    @pytest.mark.asyncio
    async def test_admin_passes(self, mock_start_span, admin_user):
        result = await AdminGuard().require_admin(admin_user.id)

        assert result.value.id == admin_user.id

    @pytest.mark.asyncio
    async def test_regular_user_rejected(self, mock_start_span, sample_user):
        result = await AdminGuard().require_admin(sample_user.id)

        assert isinstance(result.error, AdminPermissionRequiredError)
        assert result.error.status_code == 403

    @pytest.mark.asyncio
    async def test_inactive_checked_before_role(self, mock_start_span, inactive_user):
        result = await AdminGuard().require_admin(inactive_user.id)

        assert isinstance(result.error, UserInactiveError)

    @pytest.mark.asyncio
    async def test_missing_user(self, mock_start_span):
        result = await AdminGuard().require_admin(424242)

        assert isinstance(result.error, UserNotFoundError)
