from __future__ import annotations

from ..extensions import db
from teapot.time_utils import to_utc_z


class Customer(db.Model):
    """
    Customer identified by the 4-digit number staff type into the purchase screen.

    Customer id 1 is reserved for the inventory system account; its
    transactions are the stock ledger.
    """
    __tablename__ = "customers"

    # Ids are assigned by staff input, not by the database
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(128), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Customer id={self.id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": to_utc_z(self.created_at),
        }


class Transaction(db.Model):
    """
    Signed quantity change tied to a customer.

    Positive quantity = restock (inventory account), negative = purchase or
    stock decrease. Rows are append-only; balances are always derived by SUM.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("quantity != 0", name="ck_transactions_quantity_nonzero"),
        db.Index("ix_transactions_customer_created", "customer_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    # Staff username (not an FK: the row outlives renamed/removed accounts)
    created_by = db.Column(db.String(64), nullable=True)

    customer = db.relationship("Customer", backref=db.backref("transactions", lazy=True))

    def to_dict(self, *, include_customer: bool = False) -> dict:
        data = {
            "id": self.id,
            "customer_id": self.customer_id,
            "quantity": self.quantity,
            "direction": "increase" if self.quantity > 0 else "decrease",
            "created_at": to_utc_z(self.created_at),
            "created_by": self.created_by or "System",
        }
        if include_customer:
            data["customer"] = self.customer.to_dict() if self.customer else None
        return data
