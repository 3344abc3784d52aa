# Overview: Service-layer operations for the admin dashboard; read-only aggregation.

from __future__ import annotations

import math
from datetime import datetime, timedelta

from sqlalchemy.orm import joinedload

from teapot.extensions import db
from teapot.models import Transaction
from teapot.time_utils import utcnow, to_utc_z


PERIODS = {
    "all": None,
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def period_start(period: str, now: datetime | None = None) -> datetime | None:
    if period not in PERIODS:
        raise ReportError(f"period must be one of: {', '.join(PERIODS)}")
    window = PERIODS[period]
    if window is None:
        return None
    return (now or utcnow()) - window


def load_transactions(period: str = "all", now: datetime | None = None) -> list[Transaction]:
    """Every transaction (all customers) in the period, newest first, customers preloaded."""
    start = period_start(period, now)

    query = db.session.query(Transaction).options(joinedload(Transaction.customer))
    if start is not None:
        query = query.filter(Transaction.created_at >= start)

    return query.order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()


def _round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def compute_stats(transactions: list[Transaction]) -> dict:
    count = len(transactions)
    total_quantity = sum(tx.quantity for tx in transactions)

    return {
        "total_transactions": count,
        "unique_customers": len({tx.customer_id for tx in transactions}),
        "total_quantity": total_quantity,
        "average_quantity": _round_half_up(total_quantity / count) if count else 0,
    }


def dashboard(period: str = "all", now: datetime | None = None) -> dict:
    now = now or utcnow()
    transactions = load_transactions(period, now)
    start = period_start(period, now)

    return {
        "period": period,
        "start": to_utc_z(start) if start else None,
        "generated_at": to_utc_z(now),
        "stats": compute_stats(transactions),
        "transactions": [tx.to_dict(include_customer=True) for tx in transactions],
    }
