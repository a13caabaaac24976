"""Unit tests for transaction allocation and share validation"""

import pytest
from datetime import date, datetime
from bnpl_tracker.domain.allocation import (
    amount_per_cycle,
    apply_edit,
    build_transaction,
    installment_progress,
    interest_preview,
    is_installment,
    required_share_total,
    resolve_total_months,
    split_evenly,
    validate_shares,
)
from bnpl_tracker.domain.exceptions import TransactionValidationError
from bnpl_tracker.domain.models import Share, TransactionDraft


def test_resolve_total_months():
    assert resolve_total_months("bnpl") == 1
    assert resolve_total_months("3months") == 3
    assert resolve_total_months("6months") == 6
    assert resolve_total_months("12months") == 12
    assert resolve_total_months("24months") == 1  # Unknown plans span one cycle


def test_build_transaction_single_pay_defaults():
    """Single-pay purchase with no borrower goes to Personal"""
    now = datetime(2025, 1, 20, 8, 0, 0)
    txn = build_transaction(
        TransactionDraft(product_name="  Headphones ", amount=3000.0, order_date=date(2025, 1, 20)),
        now=now,
    )

    assert txn.id
    assert txn.product_name == "Headphones"
    assert txn.borrower == "Personal"
    assert txn.mode == "single"
    assert txn.shares == []
    assert txn.total_months == 1
    assert txn.monthly_payment is None
    assert txn.start_cycle_index == 2025 * 12 + 1  # Due 2025-02-05
    assert txn.created_at == now
    assert txn.updated_at == now
    assert amount_per_cycle(txn) == 3000.0


def test_build_transaction_installment_without_monthly_payment():
    """Missing monthly payment falls back to the full amount"""
    txn = build_transaction(
        TransactionDraft(
            product_name="Laptop",
            amount=6000.0,
            order_date=date(2025, 1, 26),
            payment_plan="6months",
        )
    )

    assert txn.total_months == 6
    assert txn.monthly_payment == 6000.0
    assert txn.start_cycle_index == 2025 * 12 + 2  # Due 2025-03-05
    assert amount_per_cycle(txn) == 6000.0


def test_build_transaction_generates_unique_ids(transaction_factory):
    first = transaction_factory()
    second = transaction_factory()
    assert first.id != second.id


def test_build_transaction_requires_product_name():
    with pytest.raises(TransactionValidationError, match="Product name is required"):
        build_transaction(TransactionDraft(product_name="   ", amount=100.0, order_date=date(2025, 1, 1)))


def test_build_transaction_requires_numeric_amount():
    with pytest.raises(TransactionValidationError, match="Amount must be a number"):
        build_transaction(TransactionDraft(product_name="Mug", amount="abc", order_date=date(2025, 1, 1)))
    with pytest.raises(TransactionValidationError, match="Amount must be a number"):
        build_transaction(TransactionDraft(product_name="Mug", amount=float("nan"), order_date=date(2025, 1, 1)))


def test_required_share_total():
    assert required_share_total(3000.0, "bnpl", None) == 3000.0
    assert required_share_total(3000.0, "3months", 1000.0) == 1000.0
    assert required_share_total(3000.0, "3months", None) == 3000.0


def test_shared_installment_shares_must_match_monthly_payment():
    """Shares 600 + 300 against a 1000 monthly payment are rejected"""
    with pytest.raises(TransactionValidationError, match="must add up exactly"):
        validate_shares([Share("Alice", 600.0), Share("Bob", 300.0)], 1000.0)

    # 600 + 400 is accepted
    validate_shares([Share("Alice", 600.0), Share("Bob", 400.0)], 1000.0)


def test_share_total_tolerance():
    validate_shares([Share("Alice", 500.005), Share("Bob", 500.0)], 1000.0)

    with pytest.raises(TransactionValidationError):
        validate_shares([Share("Alice", 500.05), Share("Bob", 500.0)], 1000.0)


def test_shares_need_two_complete_rows():
    with pytest.raises(TransactionValidationError, match="at least two borrowers"):
        validate_shares([Share("Alice", 1000.0)], 1000.0)

    # One incomplete row rejects the whole set
    with pytest.raises(TransactionValidationError, match="at least two borrowers"):
        validate_shares([Share("Alice", 500.0), Share("Bob", 500.0), Share("", 0.0)], 1000.0)

    with pytest.raises(TransactionValidationError, match="at least two borrowers"):
        validate_shares([Share("Alice", 1000.0), Share("Bob", -1.0)], 999.0)


def test_build_shared_transaction(transaction_factory):
    txn = transaction_factory(
        "TV",
        3000.0,
        date(2024, 12, 28),
        payment_plan="3months",
        monthly_payment=1000.0,
        shares=[Share("Alice", 500.0), Share("Bob", 500.0)],
    )

    assert txn.mode == "shared"
    assert txn.is_shared
    assert [s.borrower for s in txn.shares] == ["Alice", "Bob"]
    assert txn.total_months == 3


def test_build_shared_transaction_rejects_mismatched_shares(transaction_factory):
    with pytest.raises(TransactionValidationError):
        transaction_factory(
            "TV",
            3000.0,
            payment_plan="3months",
            monthly_payment=1000.0,
            shares=[Share("Alice", 500.0), Share("Bob", 400.0)],
        )


def test_split_evenly_last_row_absorbs_remainder():
    assert split_evenly(100.0, 3) == [33.33, 33.33, 33.34]
    assert split_evenly(1000.0, 2) == [500.0, 500.0]
    assert split_evenly(10.0, 4) == [2.5, 2.5, 2.5, 2.5]
    assert sum(split_evenly(1234.57, 7)) == pytest.approx(1234.57)


def test_split_evenly_empty_cases():
    assert split_evenly(100.0, 0) == []
    assert split_evenly(0.0, 3) == []


def test_apply_edit_keeps_cycle_anchor(transaction_factory):
    """Moving the order date does not move the installment schedule"""
    txn = transaction_factory("Laptop", 6000.0, date(2025, 1, 5), payment_plan="6months", monthly_payment=1000.0)
    edited = apply_edit(
        txn,
        {"order_date": date(2025, 6, 1), "payment_plan": "12months"},
        now=datetime(2025, 6, 2),
    )

    assert edited.order_date == date(2025, 6, 1)
    assert edited.start_cycle_index == txn.start_cycle_index
    assert edited.total_months == 6
    assert edited.created_at == txn.created_at
    assert edited.updated_at == datetime(2025, 6, 2)
    assert edited.id == txn.id


def test_apply_edit_revalidates_shared(transaction_factory):
    txn = transaction_factory(
        "TV",
        3000.0,
        payment_plan="3months",
        monthly_payment=1000.0,
        shares=[Share("Alice", 500.0), Share("Bob", 500.0)],
    )

    with pytest.raises(TransactionValidationError):
        apply_edit(txn, {"monthly_payment": 900.0})

    edited = apply_edit(txn, {"monthly_payment": 900.0, "shares": [Share("Alice", 450.0), Share("Bob", 450.0)]})
    assert amount_per_cycle(edited) == 900.0


def test_apply_edit_rejects_unknown_fields(transaction_factory):
    txn = transaction_factory()
    with pytest.raises(TransactionValidationError, match="cannot be edited"):
        apply_edit(txn, {"start_cycle_index": 1})


def test_apply_edit_empty_borrower_becomes_personal(transaction_factory):
    txn = transaction_factory(borrower="Alice")
    assert apply_edit(txn, {"borrower": ""}).borrower == "Personal"


def test_interest_preview():
    preview = interest_preview(6000.0, 1100.0, "6months")
    assert preview["total_paid"] == 6600.0
    assert preview["total_interest"] == 600.0
    assert preview["percent"] == pytest.approx(10.0)


def test_interest_preview_zero_interest_and_single_pay():
    preview = interest_preview(6000.0, 1000.0, "6months")
    assert preview == {"total_paid": 6000.0, "total_interest": 0.0, "percent": 0.0}

    assert interest_preview(6000.0, 1000.0, "bnpl") is None
    assert interest_preview(6000.0, None, "6months") is None


def test_installment_progress(transaction_factory):
    txn = transaction_factory("Laptop", 6000.0, date(2025, 1, 5), payment_plan="6months", monthly_payment=1000.0)
    start = txn.start_cycle_index

    assert installment_progress(txn, start) == (1, 6)
    assert installment_progress(txn, start + 1) == (2, 6)
    assert installment_progress(txn, start + 5) == (6, 6)
    assert installment_progress(transaction_factory(), start) is None


def test_single_pay_ignores_monthly_payment():
    txn = build_transaction(
        TransactionDraft(product_name="Mug", amount=300.0, order_date=date(2025, 1, 20), monthly_payment=100.0)
    )
    assert txn.monthly_payment is None
    assert amount_per_cycle(txn) == 300.0


def test_edit_installment_to_single_pay_charges_full_amount(transaction_factory):
    """Month count stays 3, but a single-pay plan is due in full in one cycle"""
    txn = transaction_factory("TV", 3000.0, payment_plan="3months", monthly_payment=1000.0)
    edited = apply_edit(txn, {"payment_plan": "bnpl"})

    assert edited.total_months == 3
    assert edited.monthly_payment is None
    assert amount_per_cycle(edited) == 3000.0
    assert installment_progress(edited, edited.start_cycle_index) is None


def test_is_installment():
    assert is_installment("3months", 3)
    assert not is_installment("bnpl", 3)
    assert not is_installment("3months", 1)


@pytest.mark.parametrize("field", ["product_name", "amount", "order_date", "payment_plan", "shares", "description"])
def test_apply_edit_rejects_empty_required_fields(transaction_factory, field):
    txn = transaction_factory()
    with pytest.raises(TransactionValidationError, match="cannot be empty"):
        apply_edit(txn, {field: None})


def test_apply_edit_clears_monthly_payment(transaction_factory):
    """Clearing the monthly figure of an installment falls back to the amount"""
    txn = transaction_factory("Laptop", 6000.0, payment_plan="6months", monthly_payment=1000.0)
    edited = apply_edit(txn, {"monthly_payment": None, "borrower": None})

    assert edited.monthly_payment == 6000.0
    assert edited.borrower == "Personal"
