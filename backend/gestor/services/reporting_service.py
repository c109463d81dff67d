# Overview: Revenue, expense and profit summary over the sales and expenses collections.

"""
Business summary for the reporting tools.

- revenue: sum of sale totals in the range
- expenses: sum of expense amounts in the range
- profit: revenue - expenses
- daily: per-day revenue and expenses, oldest day first
- low_stock_count: products at or below their minimum, regardless of range

Bounds are inclusive. A bare date as `end` ("2026-03-31") covers that whole
day. Records whose date cannot be parsed are left out of bounded ranges.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ..permissions import Action, Module
from ..time_utils import parse_iso_datetime
from ..validation import ValidationError
from .permission_service import AuthorizationPolicy
from .store_service import Collection, KeyedStore, WorkingSet

CENTS = Decimal("0.01")


def _money(total: Decimal) -> float:
    return float(total.quantize(CENTS, rounding=ROUND_HALF_UP))


def _parse_bound(value, field: str, *, end: bool = False) -> datetime | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be an ISO-8601 date")
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date")
    if end and parsed is not None and len(value.strip()) == 10:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def _record_time(value) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return parse_iso_datetime(value)
    except ValueError:
        return None


class ReportingService:
    def __init__(self, store: KeyedStore, policy: AuthorizationPolicy):
        self.store = store
        self.policy = policy

    def summary(self, actor, start=None, end=None) -> dict:
        self.policy.require(actor, Module.REPORTING_TOOLS, Action.VIEW)
        start_dt = _parse_bound(start, "start")
        end_dt = _parse_bound(end, "end", end=True)
        if start_dt and end_dt and start_dt > end_dt:
            raise ValidationError("start must not be after end")

        def in_range(date_value) -> bool:
            if start_dt is None and end_dt is None:
                return True
            moment = _record_time(date_value)
            if moment is None:
                return False
            if start_dt is not None and moment < start_dt:
                return False
            if end_dt is not None and moment > end_dt:
                return False
            return True

        working = WorkingSet(self.store)
        sales = [s for s in working.sales if in_range(s.date)]
        expenses = [e for e in working.load(Collection.EXPENSES) if in_range(e.date)]

        revenue = sum((Decimal(str(s.total)) for s in sales), Decimal("0"))
        spent = sum((Decimal(str(e.amount)) for e in expenses), Decimal("0"))

        daily: dict[str, dict[str, Decimal]] = {}
        for sale in sales:
            day = daily.setdefault((sale.date or "")[:10], {"revenue": Decimal("0"), "expenses": Decimal("0")})
            day["revenue"] += Decimal(str(sale.total))
        for expense in expenses:
            day = daily.setdefault((expense.date or "")[:10], {"revenue": Decimal("0"), "expenses": Decimal("0")})
            day["expenses"] += Decimal(str(expense.amount))

        return {
            "start": start,
            "end": end,
            "revenue": _money(revenue),
            "expenses": _money(spent),
            "profit": _money(revenue - spent),
            "sales_count": len(sales),
            "expense_count": len(expenses),
            "low_stock_count": sum(1 for p in working.products if p.is_low_stock),
            "daily": [
                {"date": date, "revenue": _money(v["revenue"]), "expenses": _money(v["expenses"])}
                for date, v in sorted(daily.items())
            ],
        }
