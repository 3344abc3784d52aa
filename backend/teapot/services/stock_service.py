# Overview: Service-layer operations for stock; encapsulates business logic and database work.

# backend/teapot/services/stock_service.py

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Customer, Transaction
from ..validation import ValidationError, ConflictError, coerce_int
from .purchase_service import RESERVED_CUSTOMER_ID
"""
Stock Invariants (authoritative)

- Stock lives on the reserved inventory account (customer id 1).
- Current stock is SUM(quantity) over ALL of that account's transactions;
  it is never stored as a mutable counter and never derived from a
  truncated display list.
- Stock may never go negative: a decrease larger than current stock is refused.
- Increase records +amount, decrease records -amount, attributed to the staff username.
"""

INVENTORY_ACCOUNT_NAME = "Inventory System"

DEFAULT_LOW_STOCK_THRESHOLD = 10
DEFAULT_STOCK_LOG_LIMIT = 10

# Largest single adjustment; keeps the row inside a 32-bit INTEGER column
MAX_ADJUSTMENT = 1_000_000

DIRECTIONS = ("increase", "decrease")


class StockAdjustmentError(ConflictError):
    """Adjustment refused by a stock rule; nothing was written."""


def _config(key: str, default: int) -> int:
    try:
        return int(current_app.config.get(key, default))
    except RuntimeError:
        # Outside an application context (plain service use)
        return default


def ensure_inventory_account() -> Customer:
    """
    Ensure the reserved inventory account exists.

    Safe to call repeatedly (idempotent).
    """
    account = db.session.get(Customer, RESERVED_CUSTOMER_ID)
    if account:
        return account

    account = Customer(id=RESERVED_CUSTOMER_ID, name=INVENTORY_ACCOUNT_NAME)
    db.session.add(account)
    db.session.flush()
    return account


def get_current_stock() -> int:
    """Authoritative running total of the inventory account."""
    total = db.session.query(
        func.coalesce(func.sum(Transaction.quantity), 0)
    ).filter(
        Transaction.customer_id == RESERVED_CUSTOMER_ID,
    ).scalar()
    return int(total or 0)


def list_stock_logs(limit: int | None = None) -> list[Transaction]:
    """Most recent stock changes, newest first."""
    if limit is None:
        limit = _config("STOCK_LOG_LIMIT", DEFAULT_STOCK_LOG_LIMIT)
    return db.session.query(Transaction).filter(
        Transaction.customer_id == RESERVED_CUSTOMER_ID,
    ).order_by(Transaction.created_at.desc(), Transaction.id.desc()).limit(limit).all()


def parse_amount(raw) -> int:
    """Staff-entered adjustment amount: a positive whole number up to MAX_ADJUSTMENT."""
    amount = coerce_int(raw, message="Please enter a valid number")
    if amount <= 0:
        raise ValidationError("Please enter a positive number")
    if amount > MAX_ADJUSTMENT:
        raise ValidationError("Please enter a valid number")
    return amount


def adjust_stock(direction: str, amount, *, created_by: str | None) -> Transaction:
    """
    Increase or decrease stock by `amount` units.

    Validation and the non-negative rule are applied before any write.
    """
    if direction not in DIRECTIONS:
        raise ValidationError("direction must be increase or decrease")

    units = parse_amount(amount)

    if direction == "decrease" and units > get_current_stock():
        raise StockAdjustmentError("Cannot decrease stock below 0")

    try:
        ensure_inventory_account()
        tx = Transaction(
            customer_id=RESERVED_CUSTOMER_ID,
            quantity=units if direction == "increase" else -units,
            created_by=created_by,
        )
        db.session.add(tx)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    return tx


def get_inventory_summary() -> dict:
    """Current stock, low-stock flag and the recent change log."""
    threshold = _config("LOW_STOCK_THRESHOLD", DEFAULT_LOW_STOCK_THRESHOLD)
    current_stock = get_current_stock()

    return {
        "current_stock": current_stock,
        "low_stock": current_stock < threshold,
        "low_stock_threshold": threshold,
        "recent": [tx.to_dict() for tx in list_stock_logs()],
    }
