"""Tests for BillingPeriod, status derivation and cancellation tokens."""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from fee_ledger.core.cancellation import CancellationToken
from fee_ledger.models.invoice import InvoiceStatus
from fee_ledger.services.billing_period import BillingPeriod
from fee_ledger.services.reconciliation import derive_status


class TestBillingPeriod:
    def test_str(self):
        assert str(BillingPeriod(2023, 7)) == "2023-07"

    @pytest.mark.parametrize("month", [0, 13])
    def test_rejects_invalid_month(self, month):
        with pytest.raises(ValueError):
            BillingPeriod(2023, month)

    def test_containing(self):
        assert BillingPeriod.containing(date(2024, 2, 29)) == BillingPeriod(2024, 2)

    def test_due_date(self):
        assert BillingPeriod(2023, 7).due_date(15) == date(2023, 7, 15)

    def test_due_date_clamped_to_short_months(self):
        assert BillingPeriod(2023, 2).due_date(31) == date(2023, 2, 28)
        assert BillingPeriod(2023, 4).due_date(31) == date(2023, 4, 30)

    def test_periods_sort_chronologically(self):
        periods = [BillingPeriod(2024, 1), BillingPeriod(2023, 12), BillingPeriod(2023, 7)]
        assert sorted(periods)[0] == BillingPeriod(2023, 7)


class TestDeriveStatus:
    DUE = date(2023, 7, 15)

    def test_unpaid_before_due(self):
        now = datetime(2023, 6, 20, tzinfo=UTC)
        assert derive_status(Decimal("500"), Decimal("300"), self.DUE, now) == InvoiceStatus.UNPAID

    def test_unpaid_on_due_date(self):
        now = datetime(2023, 7, 15, 23, 59, tzinfo=UTC)
        assert derive_status(Decimal("500"), Decimal("0"), self.DUE, now) == InvoiceStatus.UNPAID

    def test_overdue_after_due_date(self):
        now = datetime(2023, 7, 16, tzinfo=UTC)
        assert derive_status(Decimal("500"), Decimal("499.99"), self.DUE, now) == (
            InvoiceStatus.OVERDUE
        )

    def test_paid_wins_over_overdue(self):
        now = datetime(2023, 8, 1, tzinfo=UTC)
        assert derive_status(Decimal("500"), Decimal("500"), self.DUE, now) == InvoiceStatus.PAID
        assert derive_status(Decimal("500"), Decimal("650"), self.DUE, now) == InvoiceStatus.PAID


class TestCancellationToken:
    def test_fresh_token_is_not_cancelled(self):
        assert CancellationToken().is_cancelled() is False

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        assert token.is_cancelled() is True

    def test_deadline(self):
        assert CancellationToken(datetime.now(UTC) - timedelta(seconds=1)).is_cancelled()
        assert not CancellationToken.with_timeout(3600).is_cancelled()
