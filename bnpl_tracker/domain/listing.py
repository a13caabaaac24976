"""Filtering, search and pagination over a cycle's transactions"""

import math
from dataclasses import dataclass
from typing import List, Optional

from bnpl_tracker.domain.models import PAYMENT_PLANS, Transaction

ALL = "all"

_PLAN_LABELS = {plan.value: plan.label for plan in PAYMENT_PLANS}


@dataclass
class Page:
    """One page of a filtered transaction list"""

    items: List[Transaction]
    page: int
    total_pages: int
    total_items: int


def involves_borrower(txn: Transaction, borrower: str) -> bool:
    if txn.mode == "shared" and txn.shares:
        return any(share.borrower == borrower for share in txn.shares)
    return txn.borrower == borrower


def filter_transactions(
    transactions: List[Transaction],
    borrower: Optional[str] = None,
    plan: Optional[str] = None,
) -> List[Transaction]:
    """Keep transactions involving a borrower and/or on a plan ("all" disables a filter)"""
    out = []
    for txn in transactions:
        if borrower and borrower != ALL and not involves_borrower(txn, borrower):
            continue
        if plan and plan != ALL and txn.payment_plan != plan:
            continue
        out.append(txn)
    return out


def _search_text(txn: Transaction) -> List[str]:
    fields = [
        txn.product_name or "",
        txn.borrower or "",
        _PLAN_LABELS.get(txn.payment_plan, ""),
        txn.order_date.isoformat() if txn.order_date else "",
        txn.description or "",
    ]
    if txn.mode == "shared" and txn.shares:
        fields.append(" ".join(share.borrower or "" for share in txn.shares))
    return [f.lower() for f in fields]


def search_transactions(transactions: List[Transaction], query: Optional[str]) -> List[Transaction]:
    """Case-insensitive substring search over product, borrowers, plan label, date and description"""
    needle = (query or "").strip().lower()
    if not needle:
        return transactions
    return [t for t in transactions if any(needle in text for text in _search_text(t))]


def paginate(transactions: List[Transaction], page: int, page_size: int) -> Page:
    """Slice a list into pages; out-of-range page numbers are clamped"""
    total_pages = 1 if not transactions else math.ceil(len(transactions) / page_size)
    safe_page = min(max(page, 1), total_pages)
    start = (safe_page - 1) * page_size
    return Page(
        items=transactions[start:start + page_size],
        page=safe_page,
        total_pages=total_pages,
        total_items=len(transactions),
    )
