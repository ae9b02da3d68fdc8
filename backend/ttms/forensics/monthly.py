from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence

from .entities import Transaction
from .risk import resolve_date, score_transaction

Bucket = Literal["month_name", "year_month"]

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

SILENCE_SALES_THRESHOLD = 50_000_000
SILENCE_MIN_RISK = 85


@dataclass(frozen=True)
class MonthlyStat:
    month: str  # "March" (month_name) or "2024-03" (year_month)
    total_sales: float
    total_cash_flow: float
    risk_score: int
    flagged_count: int


def _safe_float(x: Any) -> float:
    try:
        return float(x or 0.0)
    except (TypeError, ValueError):
        return 0.0


def round_half_up(x: float) -> int:
    return int(Decimal(str(x)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _bucket_key(on: date, bucket: Bucket) -> str:
    if bucket == "year_month":
        return f"{on.year:04d}-{on.month:02d}"
    return MONTH_NAMES[on.month - 1]


def _is_silent(total_sales: float, total_cash_flow: float) -> bool:
    # High reported sales while net cash leaves the business.
    return total_sales > SILENCE_SALES_THRESHOLD and total_cash_flow < 0


def aggregate_monthly(
    transactions: Iterable[Transaction],
    *,
    month_order: Sequence[str] = MONTH_NAMES,
    bucket: Bucket = "month_name",
    reference_now: Optional[date] = None,
) -> List[MonthlyStat]:
    """
    Roll transactions up into per-month sales, cash and risk.

    month_name buckets ignore the year, so March 2023 and March 2024 land in
    the same bucket. Buckets missing from month_order are dropped.
    year_month buckets are ordered chronologically and ignore month_order.
    """
    sums: Dict[str, Dict[str, float]] = {}

    for tx in transactions:
        on = resolve_date(tx.date, reference_now)
        if on is None:
            continue

        key = _bucket_key(on, bucket)
        entry = sums.get(key)
        if entry is None:
            entry = {"sales": 0.0, "cash": 0.0, "risk": 0.0, "flagged": 0}
            sums[key] = entry

        if tx.type == "sale":
            entry["sales"] += _safe_float(tx.amount)
        entry["cash"] += _safe_float(tx.actual_cash_flow)

        result = score_transaction(tx, reference_now)
        if result.risk_level != "Low":
            entry["flagged"] += 1
            entry["risk"] += result.score

    stats: Dict[str, MonthlyStat] = {}
    for key, entry in sums.items():
        flagged = int(entry["flagged"])
        risk = round_half_up(entry["risk"] / flagged) if flagged > 0 else 0
        if _is_silent(entry["sales"], entry["cash"]):
            risk = max(risk, SILENCE_MIN_RISK)
        stats[key] = MonthlyStat(
            month=key,
            total_sales=entry["sales"],
            total_cash_flow=entry["cash"],
            risk_score=risk,
            flagged_count=flagged,
        )

    if bucket == "year_month":
        return [stats[k] for k in sorted(stats)]
    return [stats[m] for m in month_order if m in stats]
