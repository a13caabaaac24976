"""Aggregation engine - cycle membership, totals, per-borrower balances and used credit"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from bnpl_tracker.domain.allocation import amount_per_cycle, is_installment
from bnpl_tracker.domain.billing_cycle import cycle_index, get_billing_cycle
from bnpl_tracker.domain.credit import credit_utilization, remaining_credit
from bnpl_tracker.domain.exceptions import InvalidDateError
from bnpl_tracker.domain.models import (
    PERSONAL_BORROWER,
    SINGLE_PAY_PLAN,
    BillingCycle,
    BorrowerTotals,
    CycleSummary,
    CycleTotals,
    DashboardSnapshot,
    Payment,
    Transaction,
)


def is_active(txn: Transaction, cycle: BillingCycle) -> bool:
    """
    Whether a transaction has an amount due in the given cycle.

    - Single-cycle transactions: the cycle containing the order date must
      be exactly this cycle (same start and end)
    - Installments: start_cycle_index <= cycle <= start + total_months - 1
    """
    if not txn.order_date:
        return False

    if not is_installment(txn.payment_plan, txn.total_months):
        try:
            order_cycle = get_billing_cycle(txn.order_date)
        except InvalidDateError:
            return False
        return order_cycle.start == cycle.start and order_cycle.end == cycle.end

    current = cycle_index(cycle)
    return txn.start_cycle_index <= current <= txn.start_cycle_index + txn.total_months - 1


def select_active(transactions: Iterable[Transaction], cycle: BillingCycle) -> List[Transaction]:
    """Transactions due in a cycle, newest order date first, then newest created"""
    active = [t for t in transactions if is_active(t, cycle)]
    # Two stable sorts: secondary key first
    active.sort(key=lambda t: t.created_at or datetime.min, reverse=True)
    active.sort(key=lambda t: t.order_date, reverse=True)
    return active


def cycle_totals(active: Iterable[Transaction]) -> CycleTotals:
    """Total due in the cycle, and the single-pay vs installment split"""
    total = 0.0
    bnpl_total = 0.0
    for txn in active:
        total += amount_per_cycle(txn) or 0.0
        if txn.payment_plan == SINGLE_PAY_PLAN:
            bnpl_total += txn.amount or 0.0

    return CycleTotals(total=total, bnpl_total=bnpl_total, installment_total=total - bnpl_total)


def paid_by_borrower(payments: Iterable[Payment], current_cycle_index: int) -> Dict[str, float]:
    """Sum of each borrower's payments recorded against one cycle"""
    paid: Dict[str, float] = {}
    for payment in payments:
        if not payment.borrower or payment.cycle_index != current_cycle_index:
            continue
        paid[payment.borrower] = paid.get(payment.borrower, 0.0) + (payment.amount or 0.0)
    return paid


def borrower_totals(
    active: Iterable[Transaction],
    borrowers: Iterable[str],
    payments: Iterable[Payment],
    current_cycle_index: int,
) -> Dict[str, BorrowerTotals]:
    """
    Per-borrower due, paid and balance for a cycle.

    Known borrowers are seeded with zeros; borrowers that only appear on
    transactions are added as they are met. Shared transactions credit
    each share to its borrower, single ones credit the whole per-cycle
    amount. Overpayment is kept in `paid` (balance never goes negative).
    """
    totals: Dict[str, BorrowerTotals] = {name: BorrowerTotals() for name in borrowers}

    for txn in active:
        if txn.is_shared:
            for share in txn.shares:
                entry = totals.setdefault(share.borrower or PERSONAL_BORROWER, BorrowerTotals())
                entry.due += share.amount_per_cycle or 0.0
                entry.count += 1
        else:
            entry = totals.setdefault(txn.borrower or PERSONAL_BORROWER, BorrowerTotals())
            entry.due += amount_per_cycle(txn) or 0.0
            entry.count += 1

    paid = paid_by_borrower(payments, current_cycle_index)
    for name, entry in totals.items():
        entry.paid = paid.get(name, 0.0)
        entry.balance = max(entry.due - entry.paid, 0.0)

    return totals


def used_credit(transactions: Iterable[Transaction], paid_cycles: Iterable[int]) -> float:
    """
    Outstanding principal across all transactions, regardless of cycle.

    Each transaction's amount is spread evenly over its installment
    months; months whose cycle index is marked paid no longer count.
    """
    paid_set = set(paid_cycles)
    used = 0.0

    for txn in transactions:
        amount = txn.amount or 0.0
        if not amount:
            continue

        total_months = txn.total_months or 1
        start_index = txn.start_cycle_index
        if start_index is None:
            start_index = cycle_index(get_billing_cycle(txn.order_date)) if txn.order_date else 0

        unpaid = sum(1 for i in range(total_months) if start_index + i not in paid_set)
        if unpaid <= 0:
            continue

        used += unpaid / total_months * amount

    return used


def dashboard_snapshot(
    totals: CycleTotals,
    active: List[Transaction],
    borrowers: List[str],
    per_borrower: Dict[str, BorrowerTotals],
) -> DashboardSnapshot:
    ranking = rank_borrowers(per_borrower, borrowers)
    top = ranking[0] if ranking else None
    return DashboardSnapshot(
        average_due_per_borrower=totals.total / max(len(borrowers), 1),
        average_ticket_size=totals.total / len(active) if active else 0.0,
        highest_borrower=top,
        highest_borrower_due=per_borrower[top].due if top else 0.0,
    )


def rank_borrowers(per_borrower: Dict[str, BorrowerTotals], names: Optional[Iterable[str]] = None) -> List[str]:
    """Borrower names ordered by amount due, highest first (stable on ties)"""
    names = list(names) if names is not None else list(per_borrower)
    zero = BorrowerTotals()
    return sorted(names, key=lambda n: per_borrower.get(n, zero).due, reverse=True)


def aggregate(
    transactions: List[Transaction],
    payments: List[Payment],
    borrowers: List[str],
    cycle: BillingCycle,
    paid_cycles: Iterable[int] = (),
    credit_limit: float = 0.0,
) -> CycleSummary:
    """Main entry point: compute every figure shown for one billing cycle"""
    current_index = cycle_index(cycle)
    paid_cycles = list(paid_cycles)

    active = select_active(transactions, cycle)
    totals = cycle_totals(active)
    per_borrower = borrower_totals(active, borrowers, payments, current_index)
    used = used_credit(transactions, paid_cycles)

    return CycleSummary(
        cycle=cycle,
        cycle_index=current_index,
        is_paid=current_index in paid_cycles,
        active=active,
        totals=totals,
        per_borrower=per_borrower,
        snapshot=dashboard_snapshot(totals, active, list(borrowers), per_borrower),
        used_credit=used,
        credit_limit=credit_limit or 0.0,
        remaining_credit=remaining_credit(credit_limit, used),
        credit_utilization=credit_utilization(credit_limit, used),
    )
