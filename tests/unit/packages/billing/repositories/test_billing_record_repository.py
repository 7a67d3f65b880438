import pytest
from datetime import timedelta

from packages.billing.models.domain.billing import (
    BillingHistoryQuery,
    BillingStatusTransition,
    BillingStatusUpdateRequest,
)
from packages.billing.models.domain.enums import BillingStatus
from packages.billing.repositories.billing_record_repository import (
    BillingRecordRepository,
)


class TestBillingRecordRepository:
    @pytest.mark.asyncio
    async def test_transition_is_conditional_on_pending(self, pending_billing_record):
        repo = BillingRecordRepository()
        paid_at = pending_billing_record.billing_period_start + timedelta(hours=1)
        paid = BillingStatusTransition.build(
            BillingStatusUpdateRequest(status=BillingStatus.PAID), paid_at
        )
        refunded = BillingStatusTransition.build(
            BillingStatusUpdateRequest(status=BillingStatus.REFUNDED),
            paid_at + timedelta(days=1),
        )

        assert await repo.transition_from_pending(pending_billing_record.id, paid) is True
        assert (
            await repo.transition_from_pending(pending_billing_record.id, refunded)
            is False
        )

        stored = await repo.get(pending_billing_record.id)
        assert stored.status == BillingStatus.PAID
        assert stored.refunded_at is None

    @pytest.mark.asyncio
    async def test_list_by_user_counts_all_records(self, pending_billing_record):
        items, count = await BillingRecordRepository().list_by_user(
            pending_billing_record.user_id, BillingHistoryQuery(page=2, limit=1)
        )

        assert items == []
        assert count == 1
