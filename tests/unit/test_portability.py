"""Unit tests for import/export documents"""

import pytest
from datetime import date, datetime
from bnpl_tracker.domain.allocation import amount_per_cycle
from bnpl_tracker.domain.exceptions import ImportFormatError
from bnpl_tracker.domain.models import Payment
from bnpl_tracker.domain.portability import build_export, normalize_borrowers, parse_import

NOW = datetime(2025, 2, 1, 10, 0, 0)


def test_export_then_import_restores_state(sample_transactions):
    payment = Payment(
        id="p1",
        borrower="Alice",
        cycle_index=2025 * 12 + 1,
        amount=750.0,
        date=date(2025, 2, 3),
        method="gcash",
        created_at=NOW,
        updated_at=NOW,
    )
    document = build_export(
        ["Personal", "Alice", "Bob"],
        sample_transactions,
        [payment],
        credit_limit=20000.0,
        paid_cycles=[2025 * 12 + 1],
        cycle_anchor_date=date(2025, 1, 20),
        exported_at=NOW,
    )

    assert document["version"] == "1.0"
    assert document["exportedAt"] == "2025-02-01T10:00:00"
    assert document["transactions"][0]["productName"] == "Phone case"

    bundle = parse_import(document, now=NOW)

    assert bundle.borrowers == ["Personal", "Alice", "Bob"]
    assert bundle.transactions == sample_transactions
    assert bundle.payments == [payment]
    assert bundle.credit_limit == 20000.0
    assert bundle.paid_cycles == [2025 * 12 + 1]
    assert bundle.cycle_anchor_date == date(2025, 1, 20)


def test_import_fills_missing_fields():
    """Older documents without cycle fields still load"""
    bundle = parse_import(
        {
            "borrowers": ["Alice"],
            "transactions": [
                {
                    "productName": "Laptop",
                    "amount": "6000",
                    "orderDate": "2025-01-26",
                    "paymentPlan": "6months",
                }
            ],
        },
        now=NOW,
    )

    txn = bundle.transactions[0]
    assert txn.id
    assert txn.amount == 6000.0
    assert txn.total_months == 6
    assert txn.start_cycle_index == 2025 * 12 + 2
    assert txn.monthly_payment == 6000.0
    assert txn.borrower == "Personal"
    assert txn.mode == "single"
    assert txn.created_at == NOW

    # Absent optional sections leave current state alone
    assert bundle.payments is None
    assert bundle.credit_limit is None
    assert bundle.paid_cycles is None


def test_import_skips_payments_without_cycle_index():
    bundle = parse_import(
        {
            "borrowers": [],
            "transactions": [],
            "payments": [
                {"borrower": "Alice", "cycleIndex": 24301, "amount": 100, "date": "2025-02-01"},
                {"borrower": "Alice", "cycleIndex": "24301", "amount": 100},
                {"borrower": "", "cycleIndex": 24301, "amount": 100},
            ],
        },
        now=NOW,
    )

    assert len(bundle.payments) == 1
    assert bundle.payments[0].amount == 100.0


def test_normalize_borrowers_puts_personal_first():
    assert normalize_borrowers(["Alice", "Personal", "Bob", "Alice", "", 7]) == ["Personal", "Alice", "Bob"]


@pytest.mark.parametrize(
    "document",
    [
        None,
        [],
        {"transactions": []},
        {"borrowers": [], "transactions": "nope"},
        {"borrowers": "Alice", "transactions": []},
    ],
)
def test_invalid_documents_rejected(document):
    with pytest.raises(ImportFormatError):
        parse_import(document)


def test_invalid_order_date_rejected():
    with pytest.raises(ImportFormatError):
        parse_import({"borrowers": [], "transactions": [{"productName": "X", "orderDate": "someday"}]})


def test_import_single_pay_with_installment_months():
    """paymentPlan wins over a stale totalMonths when deciding the per-cycle amount"""
    bundle = parse_import(
        {
            "borrowers": [],
            "transactions": [
                {
                    "productName": "TV",
                    "amount": 3000,
                    "orderDate": "2025-01-20",
                    "paymentPlan": "bnpl",
                    "totalMonths": 3,
                    "monthlyPayment": 1000,
                }
            ],
        },
        now=NOW,
    )

    txn = bundle.transactions[0]
    assert txn.total_months == 3
    assert txn.monthly_payment is None
    assert amount_per_cycle(txn) == 3000.0
