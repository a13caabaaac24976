"""Data access layer for tracker collections and settings"""

from typing import List, Optional

from sqlalchemy.orm import Session

from bnpl_tracker.domain.exceptions import BorrowerError, NotFoundError
from bnpl_tracker.domain.models import PERSONAL_BORROWER, CreditSettings, Payment, Share, Transaction
from bnpl_tracker.infrastructure.database.models import (
    BorrowerRecord,
    PaymentRecord,
    SettingRecord,
    TransactionRecord,
)

CREDIT_LIMIT_KEY = "credit_limit"
PAID_CYCLES_KEY = "paid_cycles"


class TransactionRepository:
    """Repository for the ordered transaction collection"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_domain(row: TransactionRecord) -> Transaction:
        return Transaction(
            id=row.id,
            product_name=row.product_name,
            amount=row.amount,
            order_date=row.order_date,
            payment_plan=row.payment_plan,
            monthly_payment=row.monthly_payment,
            mode=row.mode,
            borrower=row.borrower,
            shares=[Share(borrower=s["borrower"], amount_per_cycle=s["amount_per_cycle"]) for s in row.shares or []],
            total_months=row.total_months,
            start_cycle_index=row.start_cycle_index,
            created_at=row.created_at,
            updated_at=row.updated_at,
            description=row.description or "",
        )

    @staticmethod
    def _fill(row: TransactionRecord, txn: Transaction) -> TransactionRecord:
        row.id = txn.id
        row.product_name = txn.product_name
        row.description = txn.description
        row.amount = txn.amount
        row.order_date = txn.order_date
        row.payment_plan = txn.payment_plan
        row.monthly_payment = txn.monthly_payment
        row.mode = txn.mode
        row.borrower = txn.borrower
        row.shares = [{"borrower": s.borrower, "amount_per_cycle": s.amount_per_cycle} for s in txn.shares]
        row.total_months = txn.total_months
        row.start_cycle_index = txn.start_cycle_index
        row.created_at = txn.created_at
        row.updated_at = txn.updated_at
        return row

    def _row(self, transaction_id: str) -> TransactionRecord:
        row = self.db.query(TransactionRecord).filter(TransactionRecord.id == transaction_id).first()
        if row is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return row

    def load(self) -> List[Transaction]:
        """All transactions in insertion order"""
        rows = self.db.query(TransactionRecord).order_by(TransactionRecord.position).all()
        return [self._to_domain(r) for r in rows]

    def get(self, transaction_id: str) -> Transaction:
        return self._to_domain(self._row(transaction_id))

    def append(self, txn: Transaction) -> Transaction:
        self.db.add(self._fill(TransactionRecord(), txn))
        self.db.flush()
        return txn

    def update(self, txn: Transaction) -> Transaction:
        self._fill(self._row(txn.id), txn)
        self.db.flush()
        return txn

    def remove(self, transaction_id: str) -> None:
        self.db.delete(self._row(transaction_id))
        self.db.flush()

    def replace_all(self, transactions: List[Transaction]) -> None:
        """Drop the whole collection and insert the given one in order"""
        self.db.query(TransactionRecord).delete()
        for txn in transactions:
            self.db.add(self._fill(TransactionRecord(), txn))
        self.db.flush()


class PaymentRepository:
    """Repository for recorded borrower payments"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_domain(row: PaymentRecord) -> Payment:
        return Payment(
            id=row.id,
            borrower=row.borrower,
            cycle_index=row.cycle_index,
            amount=row.amount,
            date=row.date,
            method=row.method,
            method_note=row.method_note or "",
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _fill(row: PaymentRecord, payment: Payment) -> PaymentRecord:
        row.id = payment.id
        row.borrower = payment.borrower
        row.cycle_index = payment.cycle_index
        row.amount = payment.amount
        row.date = payment.date
        row.method = payment.method
        row.method_note = payment.method_note
        row.created_at = payment.created_at
        row.updated_at = payment.updated_at
        return row

    def _row(self, payment_id: str) -> PaymentRecord:
        row = self.db.query(PaymentRecord).filter(PaymentRecord.id == payment_id).first()
        if row is None:
            raise NotFoundError(f"Payment {payment_id} not found")
        return row

    def load(self, borrower: Optional[str] = None, cycle_index: Optional[int] = None) -> List[Payment]:
        query = self.db.query(PaymentRecord)
        if borrower is not None:
            query = query.filter(PaymentRecord.borrower == borrower)
        if cycle_index is not None:
            query = query.filter(PaymentRecord.cycle_index == cycle_index)
        return [self._to_domain(r) for r in query.order_by(PaymentRecord.position).all()]

    def get(self, payment_id: str) -> Payment:
        return self._to_domain(self._row(payment_id))

    def append(self, payment: Payment) -> Payment:
        self.db.add(self._fill(PaymentRecord(), payment))
        self.db.flush()
        return payment

    def update(self, payment: Payment) -> Payment:
        self._fill(self._row(payment.id), payment)
        self.db.flush()
        return payment

    def remove(self, payment_id: str) -> None:
        self.db.delete(self._row(payment_id))
        self.db.flush()

    def replace_all(self, payments: List[Payment]) -> None:
        self.db.query(PaymentRecord).delete()
        for payment in payments:
            self.db.add(self._fill(PaymentRecord(), payment))
        self.db.flush()


class BorrowerRepository:
    """Repository for borrower names; Personal always exists"""

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> List[str]:
        names = [r.name for r in self.db.query(BorrowerRecord).order_by(BorrowerRecord.position).all()]
        if PERSONAL_BORROWER not in names:
            names.insert(0, PERSONAL_BORROWER)
        return names

    def append(self, name: str) -> bool:
        """Add a borrower; blank or existing names are ignored. Returns True if added"""
        name = (name or "").strip()
        if not name or name in self.load():
            return False
        if not self.db.query(BorrowerRecord).count():
            # Persist the sentinel ahead of the first real borrower to keep it first
            self.db.add(BorrowerRecord(name=PERSONAL_BORROWER))
        self.db.add(BorrowerRecord(name=name))
        self.db.flush()
        return True

    def remove(self, name: str) -> None:
        if name == PERSONAL_BORROWER:
            raise BorrowerError("The Personal borrower cannot be removed")
        row = self.db.query(BorrowerRecord).filter(BorrowerRecord.name == name).first()
        if row is None:
            raise NotFoundError(f"Borrower {name} not found")
        self.db.delete(row)
        self.db.flush()

    def replace_all(self, names: List[str]) -> None:
        """Replace the list; callers pass it through normalize_borrowers first"""
        self.db.query(BorrowerRecord).delete()
        for name in names:
            self.db.add(BorrowerRecord(name=name))
        self.db.flush()


class SettingsRepository:
    """Repository for the credit limit and paid-cycle markers"""

    def __init__(self, db: Session):
        self.db = db

    def _get(self, key: str):
        row = self.db.get(SettingRecord, key)
        return row.value if row is not None else None

    def _set(self, key: str, value) -> None:
        row = self.db.get(SettingRecord, key)
        if row is None:
            self.db.add(SettingRecord(key=key, value=value))
        else:
            row.value = value
        self.db.flush()

    def load(self) -> CreditSettings:
        limit = self._get(CREDIT_LIMIT_KEY)
        if not isinstance(limit, (int, float)) or limit < 0:
            limit = 0.0
        paid = self._get(PAID_CYCLES_KEY)
        if not isinstance(paid, list):
            paid = []
        return CreditSettings(credit_limit=float(limit), paid_cycles=[v for v in paid if isinstance(v, int)])

    def set_credit_limit(self, credit_limit: float) -> None:
        self._set(CREDIT_LIMIT_KEY, max(float(credit_limit), 0.0))

    def set_paid_cycles(self, paid_cycles: List[int]) -> None:
        self._set(PAID_CYCLES_KEY, list(paid_cycles))

    def toggle_paid_cycle(self, cycle_index: int) -> bool:
        """Mark a cycle settled, or unmark it if already settled. Returns the new state"""
        paid = self.load().paid_cycles
        if cycle_index in paid:
            paid = [v for v in paid if v != cycle_index]
            is_paid = False
        else:
            paid.append(cycle_index)
            is_paid = True
        self.set_paid_cycles(paid)
        return is_paid
