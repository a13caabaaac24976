"""Import/export of the full tracker state as a JSON document"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from bnpl_tracker.domain.allocation import resolve_monthly_payment, resolve_total_months
from bnpl_tracker.domain.billing_cycle import cycle_index_for
from bnpl_tracker.domain.exceptions import ImportFormatError, InvalidDateError
from bnpl_tracker.domain.models import (
    PERSONAL_BORROWER,
    SINGLE_PAY_PLAN,
    ImportBundle,
    Payment,
    Share,
    Transaction,
)
from bnpl_tracker.utils.date_utils import to_date, to_datetime, utc_now

EXPORT_VERSION = "1.0"


def _number(value: Any, default: float = 0.0) -> float:
    """Lenient numeric coercion: anything unparseable becomes the default"""
    if isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return default if result != result else result


def transaction_to_dict(txn: Transaction) -> Dict[str, Any]:
    return {
        "id": txn.id,
        "productName": txn.product_name,
        "description": txn.description,
        "amount": txn.amount,
        "borrower": txn.borrower,
        "paymentPlan": txn.payment_plan,
        "orderDate": txn.order_date.isoformat(),
        "monthlyPayment": txn.monthly_payment,
        "mode": txn.mode,
        "shares": [{"borrower": s.borrower, "amountPerCycle": s.amount_per_cycle} for s in txn.shares],
        "totalMonths": txn.total_months,
        "startCycleIndex": txn.start_cycle_index,
        "createdAt": txn.created_at.isoformat() if txn.created_at else None,
        "updatedAt": txn.updated_at.isoformat() if txn.updated_at else None,
    }


def payment_to_dict(payment: Payment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "borrower": payment.borrower,
        "cycleIndex": payment.cycle_index,
        "amount": payment.amount,
        "date": payment.date.isoformat(),
        "method": payment.method,
        "methodNote": payment.method_note,
        "createdAt": payment.created_at.isoformat() if payment.created_at else None,
        "updatedAt": payment.updated_at.isoformat() if payment.updated_at else None,
    }


def build_export(
    borrowers: List[str],
    transactions: List[Transaction],
    payments: List[Payment],
    credit_limit: float,
    paid_cycles: List[int],
    cycle_anchor_date: date,
    exported_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Assemble the export document with the current full collections"""
    exported_at = exported_at or utc_now()
    anchor = datetime.combine(cycle_anchor_date, datetime.min.time())
    return {
        "version": EXPORT_VERSION,
        "exportedAt": exported_at.isoformat(),
        "cycleAnchorDate": anchor.isoformat(),
        "creditLimit": credit_limit,
        "paidCycles": list(paid_cycles),
        "borrowers": list(borrowers),
        "transactions": [transaction_to_dict(t) for t in transactions],
        "payments": [payment_to_dict(p) for p in payments],
    }


def normalize_borrowers(names: List[Any]) -> List[str]:
    """Personal first, then the given names in order, without duplicates"""
    seen = {PERSONAL_BORROWER}
    out = [PERSONAL_BORROWER]
    for name in names:
        if not isinstance(name, str) or not name.strip() or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return out


def _parse_shares(raw: Any) -> List[Share]:
    if not isinstance(raw, list):
        return []
    return [
        Share(
            borrower=item.get("borrower") or PERSONAL_BORROWER,
            amount_per_cycle=_number(item.get("amountPerCycle")),
        )
        for item in raw
        if isinstance(item, dict)
    ]


def transaction_from_dict(raw: Dict[str, Any], now: datetime) -> Transaction:
    """
    Rebuild a stored transaction from an export entry, filling defaults.

    totalMonths falls back to the plan table, then 1; startCycleIndex
    falls back to the cycle of the order date.
    """
    if not isinstance(raw, dict):
        raise ImportFormatError("Each transaction must be an object")

    try:
        order_date = to_date(raw["orderDate"]) if raw.get("orderDate") else now.date()
    except InvalidDateError as e:
        raise ImportFormatError(f"Transaction {raw.get('id')!r} has an invalid orderDate") from e

    payment_plan = raw.get("paymentPlan") or SINGLE_PAY_PLAN
    amount = _number(raw.get("amount"))

    total_months = raw.get("totalMonths")
    if not isinstance(total_months, int) or isinstance(total_months, bool) or total_months < 1:
        total_months = resolve_total_months(payment_plan)

    start_cycle_index = raw.get("startCycleIndex")
    if not isinstance(start_cycle_index, int) or isinstance(start_cycle_index, bool):
        start_cycle_index = cycle_index_for(order_date)

    monthly = _number(raw.get("monthlyPayment")) or None

    return Transaction(
        id=raw.get("id") or str(uuid.uuid4()),
        product_name=raw.get("productName") or "",
        amount=amount,
        order_date=order_date,
        payment_plan=payment_plan,
        monthly_payment=resolve_monthly_payment(amount, payment_plan, total_months, monthly),
        mode=raw.get("mode") or "single",
        borrower=raw.get("borrower") or PERSONAL_BORROWER,
        shares=_parse_shares(raw.get("shares")),
        total_months=total_months,
        start_cycle_index=start_cycle_index,
        created_at=to_datetime(raw.get("createdAt")) or now,
        updated_at=to_datetime(raw.get("updatedAt")) or now,
        description=raw.get("description") or "",
    )


def payment_from_dict(raw: Dict[str, Any], now: datetime) -> Optional[Payment]:
    """Rebuild a payment; entries without an integer cycleIndex are skipped"""
    if not isinstance(raw, dict):
        return None
    cycle = raw.get("cycleIndex")
    if not isinstance(cycle, int) or isinstance(cycle, bool) or not raw.get("borrower"):
        return None

    try:
        paid_on = to_date(raw["date"]) if raw.get("date") else now.date()
    except InvalidDateError as e:
        raise ImportFormatError(f"Payment {raw.get('id')!r} has an invalid date") from e

    return Payment(
        id=raw.get("id") or str(uuid.uuid4()),
        borrower=raw["borrower"],
        cycle_index=cycle,
        amount=_number(raw.get("amount")),
        date=paid_on,
        method=raw.get("method") or "cash",
        method_note=raw.get("methodNote") or "",
        created_at=to_datetime(raw.get("createdAt")) or now,
        updated_at=to_datetime(raw.get("updatedAt")) or now,
    )


def parse_import(document: Any, now: Optional[datetime] = None) -> ImportBundle:
    """
    Validate an import document and convert it into replacement state.

    Nothing is mutated here; callers replace their collections only
    after this returns.

    Raises:
        ImportFormatError: borrowers/transactions missing or not arrays,
            or an entry that cannot be read
    """
    if not isinstance(document, dict):
        raise ImportFormatError("Invalid import data format")

    borrowers = document.get("borrowers")
    transactions = document.get("transactions")
    if not isinstance(borrowers, list) or not isinstance(transactions, list):
        raise ImportFormatError("Invalid import data format")

    now = now or utc_now()
    bundle = ImportBundle(
        borrowers=normalize_borrowers(borrowers),
        transactions=[transaction_from_dict(raw, now) for raw in transactions],
    )

    payments = document.get("payments")
    if payments is not None:
        if not isinstance(payments, list):
            raise ImportFormatError("payments must be an array")
        bundle.payments = [p for p in (payment_from_dict(raw, now) for raw in payments) if p is not None]

    credit_limit = document.get("creditLimit")
    if isinstance(credit_limit, (int, float)) and not isinstance(credit_limit, bool):
        bundle.credit_limit = credit_limit if credit_limit >= 0 else 0.0

    paid_cycles = document.get("paidCycles")
    if isinstance(paid_cycles, list):
        bundle.paid_cycles = [v for v in paid_cycles if isinstance(v, int) and not isinstance(v, bool)]

    anchor = document.get("cycleAnchorDate")
    if anchor:
        try:
            bundle.cycle_anchor_date = to_date(anchor)
        except InvalidDateError as e:
            raise ImportFormatError("cycleAnchorDate is not a valid date") from e

    return bundle
