"""Transaction allocator - resolves plan months, cycle anchors and per-borrower shares"""

import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple

from bnpl_tracker.domain.billing_cycle import cycle_index_for
from bnpl_tracker.domain.exceptions import TransactionValidationError
from bnpl_tracker.utils.date_utils import utc_now
from bnpl_tracker.domain.models import (
    PAYMENT_PLAN_MONTHS,
    PERSONAL_BORROWER,
    SINGLE_PAY_PLAN,
    Share,
    Transaction,
    TransactionDraft,
)

SHARE_TOLERANCE = 0.01

_CENT = Decimal("0.01")


def resolve_total_months(payment_plan: str) -> int:
    """Month count of a plan; single-pay and unknown plans span one cycle"""
    return PAYMENT_PLAN_MONTHS.get(payment_plan, 1)


def is_installment(payment_plan: str, total_months: int) -> bool:
    """A transaction is paid in installments only on a non-single-pay plan longer than one cycle"""
    return payment_plan != SINGLE_PAY_PLAN and (total_months or 1) > 1


def resolve_monthly_payment(
    amount: float,
    payment_plan: str,
    total_months: int,
    monthly_payment: Optional[float],
) -> Optional[float]:
    """
    Monthly figure stored on a transaction.

    Single-cycle purchases carry none; installments without one fall
    back to the full amount.
    """
    if not is_installment(payment_plan, total_months):
        return None
    return monthly_payment if monthly_payment else amount


def amount_per_cycle(txn: Transaction) -> float:
    """Amount a transaction contributes to each cycle it is active in"""
    if not is_installment(txn.payment_plan, txn.total_months):
        return txn.amount
    return txn.monthly_payment if txn.monthly_payment else txn.amount


def required_share_total(amount: float, payment_plan: str, monthly_payment: Optional[float]) -> float:
    """What the shares of a shared transaction must add up to, per cycle"""
    if resolve_total_months(payment_plan) > 1:
        return monthly_payment or amount
    return amount


def validate_shares(shares: List[Share], required: float) -> None:
    """
    Check shared-transaction rows.

    Raises:
        TransactionValidationError: fewer than two usable rows, or the
            amounts miss the required per-cycle total by more than 0.01
    """
    valid_rows = [s for s in shares if s.borrower and s.amount_per_cycle and s.amount_per_cycle > 0]
    if len(valid_rows) < 2 or len(valid_rows) != len(shares):
        raise TransactionValidationError(
            "Shared transactions must include at least two borrowers with amounts."
        )

    total = sum(s.amount_per_cycle for s in valid_rows)
    if abs(total - required) > SHARE_TOLERANCE:
        raise TransactionValidationError(
            f"Shared amounts must add up exactly to the required amount for this cycle "
            f"({total:.2f} != {required:.2f})."
        )


def split_evenly(amount: float, rows: int) -> List[float]:
    """
    Divide a per-cycle amount across share rows, rounded to cents.

    The last row absorbs the rounding remainder so the rows always
    add back up to the amount:
        100 / 3 -> [33.33, 33.33, 33.34]
    """
    if rows <= 0 or amount <= 0:
        return []

    total = Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP)
    base = (total / rows).quantize(_CENT, rounding=ROUND_HALF_UP)
    last = total - base * (rows - 1)

    return [float(base)] * (rows - 1) + [float(last)]


def _check_required_fields(product_name: str, amount: Any) -> None:
    if not product_name or not product_name.strip():
        raise TransactionValidationError("Product name is required.")
    if amount is None or isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise TransactionValidationError("Amount must be a number.")
    if amount != amount:  # NaN
        raise TransactionValidationError("Amount must be a number.")


def build_transaction(draft: TransactionDraft, now: Optional[datetime] = None) -> Transaction:
    """
    Normalize user input into a stored transaction.

    Every fallback is resolved here once: plan months, the starting
    cycle index, mode, borrower and the installment monthly payment.
    The resulting total_months and start_cycle_index never change.
    """
    _check_required_fields(draft.product_name, draft.amount)

    now = now or utc_now()
    total_months = resolve_total_months(draft.payment_plan)
    shared = draft.mode == "shared"

    shares: List[Share] = []
    if shared:
        shares = [Share(borrower=s.borrower, amount_per_cycle=float(s.amount_per_cycle)) for s in draft.shares]
        validate_shares(shares, required_share_total(draft.amount, draft.payment_plan, draft.monthly_payment))

    return Transaction(
        id=str(uuid.uuid4()),
        product_name=draft.product_name.strip(),
        amount=float(draft.amount),
        order_date=draft.order_date,
        payment_plan=draft.payment_plan,
        monthly_payment=resolve_monthly_payment(draft.amount, draft.payment_plan, total_months, draft.monthly_payment),
        mode="shared" if shared else "single",
        borrower=draft.borrower or PERSONAL_BORROWER,
        shares=shares,
        total_months=total_months,
        start_cycle_index=cycle_index_for(draft.order_date),
        created_at=now,
        updated_at=now,
        description=draft.description or "",
    )


EDITABLE_FIELDS = (
    "product_name",
    "amount",
    "order_date",
    "payment_plan",
    "monthly_payment",
    "borrower",
    "shares",
    "description",
)


# Fields an edit may clear; the rest must keep a value
CLEARABLE_FIELDS = ("monthly_payment", "borrower")


def apply_edit(txn: Transaction, changes: Dict[str, Any], now: Optional[datetime] = None) -> Transaction:
    """
    Merge edited fields into a transaction.

    total_months and start_cycle_index are kept as recorded at creation;
    shared transactions are re-validated against their per-cycle amount.

    Raises:
        TransactionValidationError: unknown field, a required field set
            to None, or fields that fail creation-time checks
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise TransactionValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    cleared = sorted(k for k, v in changes.items() if v is None and k not in CLEARABLE_FIELDS)
    if cleared:
        raise TransactionValidationError(f"Fields cannot be empty: {', '.join(cleared)}")

    updated = replace(txn, **changes)
    _check_required_fields(updated.product_name, updated.amount)

    if not updated.borrower:
        updated.borrower = PERSONAL_BORROWER
    updated.monthly_payment = resolve_monthly_payment(
        updated.amount, updated.payment_plan, updated.total_months, updated.monthly_payment
    )

    if updated.mode == "shared":
        validate_shares(updated.shares, amount_per_cycle(updated))
    else:
        updated.shares = []

    updated.updated_at = now or utc_now()
    return updated


def interest_preview(amount: Optional[float], monthly_payment: Optional[float], payment_plan: str) -> Optional[Dict[str, float]]:
    """Total paid and implied interest of an installment plan; None for single-pay"""
    total_months = resolve_total_months(payment_plan)
    if not is_installment(payment_plan, total_months):
        return None
    if not amount or not monthly_payment:
        return None

    total_paid = monthly_payment * total_months
    total_interest = total_paid - amount
    if total_interest <= 0:
        return {"total_paid": total_paid, "total_interest": 0.0, "percent": 0.0}
    return {
        "total_paid": total_paid,
        "total_interest": total_interest,
        "percent": total_interest / amount * 100,
    }


def installment_progress(txn: Transaction, current_cycle_index: int) -> Optional[Tuple[int, int]]:
    """1-based installment month of a transaction in a cycle, e.g. (2, 6)"""
    if not is_installment(txn.payment_plan, txn.total_months):
        return None
    month = current_cycle_index - txn.start_cycle_index + 1
    return min(max(month, 1), txn.total_months), txn.total_months
