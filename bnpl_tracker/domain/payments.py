"""Payment edits"""

from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Optional

from bnpl_tracker.domain.exceptions import PaymentValidationError
from bnpl_tracker.domain.models import Payment
from bnpl_tracker.utils.date_utils import utc_now

EDITABLE_FIELDS = ("cycle_index", "amount", "date", "method", "method_note")


def apply_payment_edit(payment: Payment, changes: Dict[str, Any], now: Optional[datetime] = None) -> Payment:
    """
    Merge edited fields into a payment. Every payment field keeps a value,
    so an explicit None is rejected rather than ignored.

    Raises:
        PaymentValidationError: unknown field or a field set to None
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise PaymentValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    cleared = sorted(k for k, v in changes.items() if v is None)
    if cleared:
        raise PaymentValidationError(f"Fields cannot be empty: {', '.join(cleared)}")

    return replace(payment, **changes, updated_at=now or utc_now())
