"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

PERSONAL_BORROWER = "Personal"

SINGLE_PAY_PLAN = "bnpl"


@dataclass(frozen=True)
class PaymentPlan:
    """Fixed payment plan definition"""

    value: str
    label: str
    months: int


PAYMENT_PLANS: List[PaymentPlan] = [
    PaymentPlan(SINGLE_PAY_PLAN, "BNPL 0%", 1),
    PaymentPlan("3months", "3-Month Installment", 3),
    PaymentPlan("6months", "6-Month Installment", 6),
    PaymentPlan("12months", "12-Month Installment", 12),
]

PAYMENT_PLAN_MONTHS: Dict[str, int] = {plan.value: plan.months for plan in PAYMENT_PLANS}

PAYMENT_METHODS = ("cash", "gcash", "maya", "bank_transfer", "other")


@dataclass(frozen=True)
class BillingCycle:
    """Billing window from the 25th to the 25th, due on the 5th after it closes"""

    start: date
    end: date
    due: date
    label: str


@dataclass
class Share:
    """One borrower's portion of a shared transaction, per cycle"""

    borrower: str
    amount_per_cycle: float


@dataclass
class TransactionDraft:
    """User-supplied transaction fields before normalization"""

    product_name: str
    amount: float
    order_date: date
    payment_plan: str = SINGLE_PAY_PLAN
    monthly_payment: Optional[float] = None
    mode: str = "single"
    borrower: Optional[str] = None
    shares: List[Share] = field(default_factory=list)
    description: str = ""


@dataclass
class Transaction:
    """Recorded purchase with its billing-cycle anchor resolved"""

    id: str
    product_name: str
    amount: float
    order_date: date
    payment_plan: str
    monthly_payment: Optional[float]
    mode: str  # "single" or "shared"
    borrower: str
    shares: List[Share]
    total_months: int
    start_cycle_index: int
    created_at: datetime
    updated_at: datetime
    description: str = ""

    @property
    def is_shared(self) -> bool:
        return self.mode == "shared" and len(self.shares) > 0


@dataclass
class Payment:
    """Money received from a borrower, counted against one billing cycle"""

    id: str
    borrower: str
    cycle_index: int
    amount: float
    date: date
    method: str = "cash"
    method_note: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class CreditSettings:
    """Global credit limit and the cycles marked as settled"""

    credit_limit: float = 0.0
    paid_cycles: List[int] = field(default_factory=list)


@dataclass
class BorrowerTotals:
    """Per-borrower obligations for one cycle"""

    due: float = 0.0
    count: int = 0
    paid: float = 0.0
    balance: float = 0.0

    @property
    def surplus(self) -> float:
        return max(self.paid - self.due, 0.0)


@dataclass
class CycleTotals:
    """Amounts due in one cycle, split by plan type"""

    total: float
    bnpl_total: float
    installment_total: float


@dataclass
class DashboardSnapshot:
    """Headline figures derived from the cycle totals"""

    average_due_per_borrower: float
    average_ticket_size: float
    highest_borrower: Optional[str]
    highest_borrower_due: float


@dataclass
class CycleSummary:
    """Everything computed for a single billing cycle"""

    cycle: BillingCycle
    cycle_index: int
    is_paid: bool
    active: List[Transaction]
    totals: CycleTotals
    per_borrower: Dict[str, BorrowerTotals]
    snapshot: DashboardSnapshot
    used_credit: float
    credit_limit: float
    remaining_credit: Optional[float]
    credit_utilization: Optional[float]


@dataclass
class ImportBundle:
    """Validated contents of an import document, ready to replace current state"""

    borrowers: List[str]
    transactions: List[Transaction]
    payments: Optional[List[Payment]] = None
    credit_limit: Optional[float] = None
    paid_cycles: Optional[List[int]] = None
    cycle_anchor_date: Optional[date] = None
