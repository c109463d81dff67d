"""
Business summary tests.

Verifies:
- revenue, expenses and profit are summed over the selected range
- a bare end date covers the whole day
- only roles with reporting-tools/view can read the summary
"""

import pytest

from gestor.services.permission_service import AuthorizationDenied
from gestor.services.store_service import Collection
from gestor.validation import ValidationError


@pytest.fixture
def ledger_history(services):
    services.store.write_collection(Collection.SALES, [
        {"id": "s3", "date": "2026-03-31T23:30:00Z", "total": 20.1, "items": []},
        {"id": "s2", "date": "2026-03-15T10:00:00Z", "total": 10.2, "items": []},
        {"id": "s1", "date": "2026-02-27T09:00:00Z", "total": 99, "items": []},
    ]).raise_for_error()
    services.store.write_collection(Collection.EXPENSES, [
        {"id": "x1", "description": "Rent", "amount": 12.25, "date": "2026-03-15T08:00:00Z"},
        {"id": "x2", "description": "Old", "amount": 40, "date": "2026-01-01T08:00:00Z"},
    ]).raise_for_error()
    return services


class TestSummary:

    def test_whole_history(self, ledger_history, manager):
        report = ledger_history.reports.summary(manager)
        assert report["revenue"] == 129.3
        assert report["expenses"] == 52.25
        assert report["profit"] == 77.05
        assert (report["sales_count"], report["expense_count"]) == (3, 2)

    def test_range_with_bare_end_date(self, ledger_history, clerk):
        report = ledger_history.reports.summary(clerk, start="2026-03-01", end="2026-03-31")
        assert report["revenue"] == 30.3
        assert report["expenses"] == 12.25
        assert report["profit"] == 18.05
        assert report["sales_count"] == 2

    def test_daily_breakdown(self, ledger_history, manager):
        report = ledger_history.reports.summary(manager, start="2026-03-01T00:00:00Z")
        assert report["daily"] == [
            {"date": "2026-03-15", "revenue": 10.2, "expenses": 12.25},
            {"date": "2026-03-31", "revenue": 20.1, "expenses": 0.0},
        ]

    def test_low_stock_count_ignores_range(self, services, manager):
        # Seeded stock: laptop 5/2, cola 48/12, rice 100/20
        assert services.reports.summary(manager)["low_stock_count"] == 0
        services.facade.issue_stock(manager, "1", 3)
        assert services.reports.summary(manager, end="2000-01-01")["low_stock_count"] == 1

    def test_empty_store(self, services, manager):
        report = services.reports.summary(manager)
        assert (report["revenue"], report["expenses"], report["profit"]) == (0.0, 0.0, 0.0)
        assert report["daily"] == []

    @pytest.mark.parametrize("start,end", [
        ("yesterday", None),
        (None, "2026-13-01"),
        ("2026-04-01", "2026-03-01"),
        (20260301, None),
    ])
    def test_invalid_range(self, services, manager, start, end):
        with pytest.raises(ValidationError):
            services.reports.summary(manager, start=start, end=end)

    def test_warehouse_has_no_reporting(self, services, warehouse):
        with pytest.raises(AuthorizationDenied):
            services.reports.summary(warehouse)
