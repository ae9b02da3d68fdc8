"""
Forensics - canonical entities.

Responsibility:
- Define the record shapes the engine reads: transactions plus the parallel
  vendor / sales-register / cash-flow / transfer / monthly-sales tables.

Design notes:
- Every record is frozen. Analyses read records and produce new findings.
- Amounts stay floats at rest. Anything that compares money exactly goes
  through `to_money` first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Literal, Optional

TransactionType = Literal["sale", "purchase", "expense", "transfer", "loan_in", "loan_out"]
RiskLevel = Literal["Low", "Medium", "High", "Critical"]

# Bank account placeholder used when the account is unknown / not applicable.
NOT_APPLICABLE = "N/A"

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """
    Quantize a currency amount to two decimal places.

    Non-numeric values become Decimal("0.00").
    """
    try:
        return Decimal(str(value if value is not None else 0)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return Decimal("0.00")


@dataclass(frozen=True)
class Transaction:
    """
    A single booked event.

    Invariants:
    - amount is a magnitude (>= 0)
    - actual_cash_flow is signed and may be 0 even for a recognized sale
    """
    id: str
    date: Optional[date]
    amount: float
    type: TransactionType
    counterparty_name: str = "Unknown"
    category: str = "General"
    is_related_party: bool = False
    is_disclosed: bool = True
    actual_cash_flow: float = 0.0
    stated_purpose: Optional[str] = None
    actual_usage: Optional[str] = None


@dataclass(frozen=True)
class VendorRecord:
    vendor_id: str
    name: str
    bank_account_number: str = NOT_APPLICABLE
    ifsc_code: str = NOT_APPLICABLE
    bank_address: str = ""
    tax_id: str = ""


@dataclass(frozen=True)
class SalesRegisterRecord:
    record_id: str
    customer_name: str
    bank_account_number: str = NOT_APPLICABLE
    ifsc_code: str = NOT_APPLICABLE
    location: str = ""
    tax_id: str = ""


@dataclass(frozen=True)
class CashFlowRecord:
    """
    One day of a cash book.

    Expected invariant (checked, not enforced):
    closing_balance == opening_balance + cash_in - cash_out
    """
    date: str
    opening_balance: float
    cash_in: float
    cash_out: float
    closing_balance: float
    flag: str = "OK"

    @property
    def declared_ok(self) -> bool:
        return (self.flag or "").strip().lower() == "ok"


@dataclass(frozen=True)
class TransferRecord:
    """One leg of an inter-account bank transfer. Blank accounts mean external cash."""
    from_account: str
    to_account: str
    amount: float
    remark: str = ""
    reason: Optional[str] = None


@dataclass(frozen=True)
class MonthlySalesRecord:
    month: str
    sales_amount: float
    remark: Optional[str] = None


@dataclass(frozen=True)
class RecordSet:
    """Everything a single analysis run looks at, already normalized."""
    transactions: List[Transaction] = field(default_factory=list)
    vendors: List[VendorRecord] = field(default_factory=list)
    sales_register: List[SalesRegisterRecord] = field(default_factory=list)
    cash_flow: List[CashFlowRecord] = field(default_factory=list)
    transfers: List[TransferRecord] = field(default_factory=list)
    sales_summary: List[MonthlySalesRecord] = field(default_factory=list)
