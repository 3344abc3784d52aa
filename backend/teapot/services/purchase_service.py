# Overview: Service-layer operations for purchases; encapsulates the quota rule and database work.

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Customer, Transaction
from ..validation import ValidationError, ConflictError, coerce_int
from teapot.time_utils import utcnow, as_utc_naive, to_utc_z, format_countdown
"""
Purchase Quota Invariants (authoritative)

- A customer may buy at most PURCHASE_LIMIT units within any trailing QUOTA_WINDOW.
- Units bought = SUM(ABS(quantity)) over the customer's transactions with
  created_at > now - QUOTA_WINDOW (strict: a row exactly one window old has expired).
- The window is anchored to the OLDEST in-window transaction: a denied customer
  becomes eligible again at oldest.created_at + QUOTA_WINDOW, not at midnight.
- RESERVED_CUSTOMER_ID is the inventory account and never goes through this flow.
- Unknown customers are created on first check and get the full quota.
- Every write is preceded by a fresh check; the stored ledger is the only state.
"""

PURCHASE_LIMIT = 5
RESERVED_CUSTOMER_ID = 1
QUOTA_WINDOW = timedelta(hours=24)

STATUS_ALLOWED = "allowed"
STATUS_DENIED = "denied"

_CUSTOMER_ID_RE = re.compile(r"[0-9]{4}")


class PurchaseValidationError(ValidationError):
    """Bad customer id or quantity; nothing was written."""


class PurchaseDeniedError(ConflictError):
    """The quota rule refused the purchase; nothing was written."""

    def __init__(self, message: str, eligibility: "Eligibility"):
        super().__init__(message)
        self.eligibility = eligibility


@dataclass
class Eligibility:
    customer_id: int
    status: str
    remaining: int
    total_bought: int
    checked_at: datetime
    next_eligible_at: datetime | None = None
    is_new_customer: bool = False
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def eligible(self) -> bool:
        return self.status == STATUS_ALLOWED

    @property
    def seconds_until_eligible(self) -> int:
        return seconds_until(self.next_eligible_at, self.checked_at)

    def to_dict(self) -> dict:
        seconds = self.seconds_until_eligible
        return {
            "customer_id": self.customer_id,
            "status": self.status,
            "eligible": self.eligible,
            "limit": PURCHASE_LIMIT,
            "remaining": self.remaining,
            "total_bought": self.total_bought,
            "is_new_customer": self.is_new_customer,
            "checked_at": to_utc_z(self.checked_at),
            "next_eligible_at": to_utc_z(self.next_eligible_at),
            "seconds_until_eligible": seconds,
            "countdown": format_countdown(seconds) if self.next_eligible_at else None,
            "transactions": [tx.to_dict() for tx in self.transactions],
        }


def seconds_until(deadline: datetime | None, now: datetime) -> int:
    """Whole seconds left before deadline (0 once reached or when there is none)."""
    if deadline is None:
        return 0
    return max(0, math.floor((deadline - now).total_seconds()))


def parse_customer_id(raw) -> int:
    """
    Validate staff input for the customer id field.

    Exactly four ASCII digits; the reserved inventory id is refused.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise PurchaseValidationError("Please enter a customer ID")

    if isinstance(raw, int) and not isinstance(raw, bool):
        raw = str(raw)
    if not isinstance(raw, str) or not _CUSTOMER_ID_RE.fullmatch(raw):
        raise PurchaseValidationError("Customer ID must be exactly 4 digits")

    customer_id = int(raw)
    if customer_id == RESERVED_CUSTOMER_ID:
        raise PurchaseValidationError("This ID is reserved for inventory management")
    return customer_id


def evaluate_window(
    transactions: Iterable[Transaction],
    now: datetime,
) -> tuple[str, int, int, datetime | None]:
    """
    Apply the quota rule to a customer's transactions.

    Pure function: rows outside the window are ignored, so callers may pass
    a superset. Returns (status, remaining, total_bought, next_eligible_at).
    """
    cutoff = now - QUOTA_WINDOW
    in_window = [
        (as_utc_naive(tx.created_at), tx.quantity)
        for tx in transactions
        if as_utc_naive(tx.created_at) > cutoff
    ]

    total_bought = sum(abs(quantity) for _, quantity in in_window)

    if total_bought >= PURCHASE_LIMIT:
        oldest = min(created_at for created_at, _ in in_window)
        return STATUS_DENIED, 0, total_bought, oldest + QUOTA_WINDOW

    return STATUS_ALLOWED, PURCHASE_LIMIT - total_bought, total_bought, None


def _commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def window_transactions(customer_id: int, now: datetime) -> list[Transaction]:
    """The customer's transactions inside the quota window, newest first."""
    return db.session.query(Transaction).filter(
        Transaction.customer_id == customer_id,
        Transaction.created_at > now - QUOTA_WINDOW,
    ).order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()


def check_eligibility(raw_customer_id, *, now: datetime | None = None) -> Eligibility:
    """
    Decide whether the customer may buy now and how many units are left.

    Creates the customer row on first sight (new customers get the full quota).
    Raises PurchaseValidationError for bad ids before touching the database.
    """
    customer_id = parse_customer_id(raw_customer_id)
    now = as_utc_naive(now) if now is not None else utcnow()

    customer = db.session.get(Customer, customer_id)
    if customer is None:
        db.session.add(Customer(id=customer_id, name=None))
        _commit()
        return Eligibility(
            customer_id=customer_id,
            status=STATUS_ALLOWED,
            remaining=PURCHASE_LIMIT,
            total_bought=0,
            checked_at=now,
            is_new_customer=True,
        )

    transactions = window_transactions(customer_id, now)
    status, remaining, total_bought, next_eligible_at = evaluate_window(transactions, now)

    return Eligibility(
        customer_id=customer_id,
        status=status,
        remaining=remaining,
        total_bought=total_bought,
        checked_at=now,
        next_eligible_at=next_eligible_at,
        transactions=transactions,
    )


def make_purchase(raw_customer_id, quantity, *, created_by: str | None) -> Eligibility:
    """
    Record a purchase of `quantity` units and return the refreshed eligibility.

    The check runs again right before the insert; a denied customer or a
    quantity above the remaining quota raises PurchaseDeniedError.
    """
    customer_id = parse_customer_id(raw_customer_id)
    try:
        units = coerce_int(quantity, message="Quantity must be a whole number")
    except ValidationError as exc:
        raise PurchaseValidationError(str(exc)) from exc
    if units <= 0:
        raise PurchaseValidationError("Quantity must be a positive number")

    current = check_eligibility(raw_customer_id)
    if not current.eligible:
        raise PurchaseDeniedError("Purchase not allowed yet!", current)
    if units > current.remaining:
        raise PurchaseDeniedError(
            f"Cannot purchase {units} items. Only {current.remaining} remaining.",
            current,
        )

    db.session.add(Transaction(
        customer_id=customer_id,
        quantity=-units,
        created_by=created_by,
    ))
    _commit()

    return check_eligibility(raw_customer_id)


def wait_until_eligible(
    raw_customer_id,
    *,
    clock: Callable[[], datetime] = utcnow,
    sleep: Callable[[float], None] = time.sleep,
    on_tick: Callable[[int], None] | None = None,
    interval: float = 1.0,
) -> Eligibility:
    """
    Live countdown: wake up every `interval` seconds until the customer may buy.

    on_tick receives the whole seconds left. The check is re-run once the
    clock reaches next_eligible_at, never earlier.
    """
    result = check_eligibility(raw_customer_id, now=clock())
    while not result.eligible:
        now = clock()
        if now >= result.next_eligible_at:
            result = check_eligibility(raw_customer_id, now=now)
            continue
        if on_tick is not None:
            on_tick(seconds_until(result.next_eligible_at, now))
        sleep(interval)
    return result
