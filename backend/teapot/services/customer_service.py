# Overview: Service-layer operations for customers; lookups and full purchase history.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import Customer, Transaction


def get_customer(customer_id: int) -> Customer | None:
    return db.session.get(Customer, customer_id)


def list_customer_transactions(customer_id: int, *, limit: int | None = None) -> list[Transaction]:
    """Full history for one customer, newest first (no quota window applied)."""
    query = db.session.query(Transaction).filter(
        Transaction.customer_id == customer_id,
    ).order_by(Transaction.created_at.desc(), Transaction.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def customer_summary(customer_id: int) -> dict | None:
    """Customer row plus lifetime counts; None when the customer does not exist."""
    customer = get_customer(customer_id)
    if customer is None:
        return None

    count, units = db.session.query(
        func.count(Transaction.id),
        func.coalesce(func.sum(func.abs(Transaction.quantity)), 0),
    ).filter(Transaction.customer_id == customer_id).one()

    data = customer.to_dict()
    data["transaction_count"] = int(count or 0)
    data["lifetime_units"] = int(units or 0)
    return data
