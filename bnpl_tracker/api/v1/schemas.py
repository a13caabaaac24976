"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bnpl_tracker.domain.allocation import amount_per_cycle, installment_progress
from bnpl_tracker.domain.models import BillingCycle, BorrowerTotals, Payment, Transaction

PlanValue = Literal["bnpl", "3months", "6months", "12months"]
PaymentMethod = Literal["cash", "gcash", "maya", "bank_transfer", "other"]

# Payment models have a field named "date"
CalendarDate = date


class CamelModel(BaseModel):
    """JSON fields use the camelCase names of the export format"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShareSchema(CamelModel):
    """One borrower's per-cycle share of a shared transaction"""

    borrower: str = Field(..., min_length=1)
    amount_per_cycle: float = Field(..., gt=0)


class TransactionCreate(CamelModel):
    """Request body for POST /v1/transactions"""

    product_name: str = Field(..., min_length=1, description="What was bought")
    amount: float = Field(..., description="Total principal")
    order_date: date
    payment_plan: PlanValue = "bnpl"
    monthly_payment: Optional[float] = Field(None, ge=0, description="Amount due per cycle on installment plans")
    mode: Literal["single", "shared"] = "single"
    borrower: Optional[str] = None
    shares: List[ShareSchema] = Field(default_factory=list)
    description: str = ""


class TransactionUpdate(CamelModel):
    """Request body for PATCH /v1/transactions/{id}; only sent fields change"""

    product_name: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = None
    order_date: Optional[date] = None
    payment_plan: Optional[PlanValue] = None
    monthly_payment: Optional[float] = Field(None, ge=0)
    borrower: Optional[str] = None
    shares: Optional[List[ShareSchema]] = None
    description: Optional[str] = None


class TransactionSchema(CamelModel):
    """Stored transaction"""

    id: str
    product_name: str
    description: str
    amount: float
    order_date: date
    payment_plan: str
    monthly_payment: Optional[float]
    mode: str
    borrower: str
    shares: List[ShareSchema]
    total_months: int
    start_cycle_index: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionSchema":
        return cls(
            id=txn.id,
            product_name=txn.product_name,
            description=txn.description,
            amount=txn.amount,
            order_date=txn.order_date,
            payment_plan=txn.payment_plan,
            monthly_payment=txn.monthly_payment,
            mode=txn.mode,
            borrower=txn.borrower,
            shares=[ShareSchema(borrower=s.borrower, amount_per_cycle=s.amount_per_cycle) for s in txn.shares],
            total_months=txn.total_months,
            start_cycle_index=txn.start_cycle_index,
            created_at=txn.created_at,
            updated_at=txn.updated_at,
        )


class CycleTransactionSchema(TransactionSchema):
    """Transaction as listed in a cycle, with its amount and installment month"""

    amount_for_cycle: float
    progress: Optional[str] = None

    @classmethod
    def for_cycle(cls, txn: Transaction, cycle_index: int) -> "CycleTransactionSchema":
        progress = installment_progress(txn, cycle_index)
        return cls(
            **TransactionSchema.from_domain(txn).model_dump(),
            amount_for_cycle=amount_per_cycle(txn),
            progress=f"{progress[0]} / {progress[1]}" if progress else None,
        )


class PaymentCreate(CamelModel):
    """Request body for POST /v1/payments"""

    borrower: str = Field(..., min_length=1)
    cycle_index: int = Field(..., description="Cycle this payment counts against")
    amount: float = Field(..., gt=0)
    date: CalendarDate = Field(default_factory=CalendarDate.today)
    method: PaymentMethod = "cash"
    method_note: str = ""


class PaymentUpdate(CamelModel):
    """Request body for PATCH /v1/payments/{id}"""

    cycle_index: Optional[int] = None
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[CalendarDate] = None
    method: Optional[PaymentMethod] = None
    method_note: Optional[str] = None


class PaymentSchema(CamelModel):
    """Recorded payment"""

    id: str
    borrower: str
    cycle_index: int
    amount: float
    date: CalendarDate
    method: str
    method_note: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, payment: Payment) -> "PaymentSchema":
        return cls(
            id=payment.id,
            borrower=payment.borrower,
            cycle_index=payment.cycle_index,
            amount=payment.amount,
            date=payment.date,
            method=payment.method,
            method_note=payment.method_note,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )


class BorrowerCreate(CamelModel):
    name: str = Field(..., min_length=1)


class BorrowerListResponse(CamelModel):
    borrowers: List[str]


class SettingsResponse(CamelModel):
    """Response for GET /v1/settings"""

    credit_limit: float
    paid_cycles: List[int]


class CreditLimitUpdate(CamelModel):
    credit_limit: float = Field(..., ge=0, description="0 disables the limit")


class CycleSchema(CamelModel):
    """Billing cycle boundaries"""

    index: int
    start: date
    end: date
    due: date
    label: str

    @classmethod
    def from_domain(cls, cycle: BillingCycle, index: int) -> "CycleSchema":
        return cls(index=index, start=cycle.start, end=cycle.end, due=cycle.due, label=cycle.label)


class BorrowerTotalsSchema(CamelModel):
    """One borrower's figures for a cycle"""

    name: str
    due: float
    count: int
    paid: float
    balance: float
    surplus: float

    @classmethod
    def from_domain(cls, name: str, totals: BorrowerTotals) -> "BorrowerTotalsSchema":
        return cls(
            name=name,
            due=totals.due,
            count=totals.count,
            paid=totals.paid,
            balance=totals.balance,
            surplus=totals.surplus,
        )


class SnapshotSchema(CamelModel):
    average_due_per_borrower: float
    average_ticket_size: float
    highest_borrower: Optional[str] = None
    highest_borrower_due: float


class CycleSummaryResponse(CamelModel):
    """Response for GET /v1/cycles/current and /v1/cycles/{index}"""

    cycle: CycleSchema
    is_paid: bool
    current_cycle_total: float
    current_cycle_bnpl_total: float
    current_cycle_installment_total: float
    borrowers: List[BorrowerTotalsSchema]
    snapshot: SnapshotSchema
    used_credit: float
    credit_limit: float
    remaining_credit: Optional[float] = None
    credit_utilization: Optional[float] = None
    transactions: List[CycleTransactionSchema]


class TransactionPageResponse(CamelModel):
    """Response for GET /v1/cycles/{index}/transactions"""

    cycle_index: int
    page: int
    total_pages: int
    total_items: int
    transactions: List[CycleTransactionSchema]


class PaidToggleResponse(CamelModel):
    cycle_index: int
    is_paid: bool


class PlanSchema(CamelModel):
    value: str
    label: str
    months: int


class InterestPreviewRequest(CamelModel):
    amount: float = Field(..., gt=0)
    monthly_payment: float = Field(..., gt=0)
    payment_plan: PlanValue


class InterestPreviewResponse(CamelModel):
    total_paid: float
    total_interest: float
    percent: float


class SplitRequest(CamelModel):
    amount: float = Field(..., gt=0, description="Per-cycle amount to divide")
    rows: int = Field(..., ge=1, le=50)


class SplitResponse(CamelModel):
    amounts: List[float]


class ImportResponse(CamelModel):
    """Response for POST /v1/data/import"""

    borrowers: int
    transactions: int
    payments: Optional[int] = None
    cycle_anchor_date: Optional[date] = None
