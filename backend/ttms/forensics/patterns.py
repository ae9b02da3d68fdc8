"""
Forensics - cross-record pattern scans.

Each scan reads one record table in input order and returns a list of
findings. The first record seen for a key is the "original"; later ones are
duplicates. Empty input yields an empty list and inputs are never mutated.

Scans:
- duplicate vendors (shared bank account)
- duplicate sales-register entries (shared record id)
- cash-flow reconciliation (opening + in - out vs closing)
- circular trading (A -> B -> A within a tolerance)
- sales spikes (computed from the mean, or trusted from an upstream remark)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, Dict, Generic, Hashable, Iterable, List, Literal, Optional, Sequence, Tuple, TypeVar

from .entities import (
    NOT_APPLICABLE,
    CashFlowRecord,
    MonthlySalesRecord,
    SalesRegisterRecord,
    TransferRecord,
    VendorRecord,
    to_money,
)

T = TypeVar("T")

SpikeMode = Literal["compute", "remark"]

CIRCULAR_TOLERANCE = Decimal("0.05")
SPIKE_MULTIPLIER = Decimal("1.5")
SPIKE_REMARK = "HIGH JUMP"


@dataclass(frozen=True)
class DuplicatePair(Generic[T]):
    original: T
    duplicate: T


@dataclass(frozen=True)
class CashFlowAnomaly:
    date: str
    expected: float
    actual: float
    difference: float  # actual - expected
    flag: str = ""


@dataclass(frozen=True)
class CircularTrade:
    cycle: Tuple[str, str, str]
    amount: float
    legs: Tuple[int, int]


@dataclass(frozen=True)
class SalesSpike:
    month: str
    amount: float
    growth: str
    ratio_to_mean: Optional[float] = None


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def find_duplicates(
    records: Iterable[T],
    key: Callable[[T], Optional[Hashable]],
    *,
    skip_keys: Sequence[Hashable] = (),
) -> List[DuplicatePair[T]]:
    """
    First-seen duplicate scan.

    Records whose key is None / blank or listed in skip_keys never match and
    are never stored.
    """
    seen: Dict[Hashable, T] = {}
    pairs: List[DuplicatePair[T]] = []

    for record in records:
        k = key(record)
        if k is None or (isinstance(k, str) and _blank(k)) or k in skip_keys:
            continue
        original = seen.get(k)
        if original is None:
            seen[k] = record
        else:
            pairs.append(DuplicatePair(original=original, duplicate=record))

    return pairs


def detect_duplicate_vendors(vendors: Iterable[VendorRecord]) -> List[DuplicatePair[VendorRecord]]:
    return find_duplicates(
        vendors,
        lambda v: v.bank_account_number,
        skip_keys=(NOT_APPLICABLE,),
    )


def detect_duplicate_sales(records: Iterable[SalesRegisterRecord]) -> List[DuplicatePair[SalesRegisterRecord]]:
    return find_duplicates(records, lambda r: r.record_id)


def reconcile_cash_flow(records: Iterable[CashFlowRecord]) -> List[CashFlowAnomaly]:
    """
    Formula:
      expected = opening + cash_in - cash_out
      difference = closing - expected

    Compared exactly after quantizing to cents.
    """
    anomalies: List[CashFlowAnomaly] = []
    for r in records:
        expected = to_money(r.opening_balance) + to_money(r.cash_in) - to_money(r.cash_out)
        actual = to_money(r.closing_balance)
        if expected != actual:
            anomalies.append(
                CashFlowAnomaly(
                    date=r.date,
                    expected=float(expected),
                    actual=float(actual),
                    difference=float(actual - expected),
                    flag=r.flag,
                )
            )
    return anomalies


def declared_cash_flow_issues(records: Iterable[CashFlowRecord]) -> List[CashFlowRecord]:
    """Days the cash book itself marks as not OK (e.g. "Cash Missing")."""
    return [r for r in records if not r.declared_ok]


def detect_circular_trading(transfers: Sequence[TransferRecord]) -> List[CircularTrade]:
    """
    Two-hop cycles only: leg i (A -> B) followed by a later leg j (B -> A).

    The tolerance is 5% of the first leg's amount, so the check is not
    symmetric in the two legs.
    """
    legs = list(transfers)
    cycles: List[CircularTrade] = []

    for i, first in enumerate(legs):
        if _blank(first.from_account) or _blank(first.to_account):
            continue
        first_amount = to_money(first.amount)
        margin = first_amount * CIRCULAR_TOLERANCE

        for j in range(i + 1, len(legs)):
            second = legs[j]
            if first.to_account != second.from_account or first.from_account != second.to_account:
                continue
            if abs(first_amount - to_money(second.amount)) <= margin:
                cycles.append(
                    CircularTrade(
                        cycle=(first.from_account, first.to_account, first.from_account),
                        amount=float(first_amount),
                        legs=(i, j),
                    )
                )

    return cycles


def _mean_sales(records: Sequence[MonthlySalesRecord]) -> Decimal:
    if not records:
        return Decimal("0")
    total = sum((to_money(r.sales_amount) for r in records), Decimal("0"))
    return total / len(records)


def detect_sales_spikes(
    records: Sequence[MonthlySalesRecord],
    mode: SpikeMode = "compute",
) -> List[SalesSpike]:
    """
    compute: flag months above 1.5x the mean of the given set.
    remark:  trust a remark already set upstream (contains "HIGH JUMP").
    """
    rows = list(records)
    spikes: List[SalesSpike] = []

    if mode == "remark":
        for r in rows:
            if r.remark and SPIKE_REMARK in r.remark:
                spikes.append(SalesSpike(month=r.month, amount=float(r.sales_amount), growth=r.remark))
        return spikes

    mean = _mean_sales(rows)
    threshold = mean * SPIKE_MULTIPLIER
    for r in rows:
        amount = to_money(r.sales_amount)
        if amount > threshold:
            ratio = float(round(amount / mean, 2)) if mean else None
            spikes.append(
                SalesSpike(month=r.month, amount=float(r.sales_amount), growth=SPIKE_REMARK, ratio_to_mean=ratio)
            )
    return spikes


def annotate_sales_spikes(records: Sequence[MonthlySalesRecord]) -> List[MonthlySalesRecord]:
    """Copy of the records with the spike remark attached where the mean rule fires."""
    rows = list(records)
    threshold = _mean_sales(rows) * SPIKE_MULTIPLIER
    return [
        replace(r, remark=SPIKE_REMARK) if to_money(r.sales_amount) > threshold else r
        for r in rows
    ]
