# backend/ttms/forensics/risk.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Tuple

from .entities import RiskLevel, Transaction

YEAR_END_MONTH = 3
YEAR_END_SPIKE_AMOUNT = 50_000_000

YEAR_END_SPIKE_POINTS = 40
RELATED_PARTY_POINTS = 50
CASH_REALITY_POINTS = 45
INTENT_MISMATCH_POINTS = 60

MAX_SCORE = 100


@dataclass(frozen=True)
class RiskAnalysisResult:
    transaction_id: str
    risk_level: RiskLevel
    risk_factors: List[str]
    score: int


Layer = Callable[[Transaction, Optional[date]], Optional[Tuple[int, str]]]


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def _as_float(x: Any) -> Optional[float]:
    if x is None:
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def risk_level_for(score: int) -> RiskLevel:
    if score > 80:
        return "Critical"
    if score > 60:
        return "High"
    if score > 30:
        return "Medium"
    return "Low"


def resolve_date(value: Any, reference_now: Optional[date] = None) -> Optional[date]:
    """
    Best-effort date for a transaction.

    A missing date means "entered today" (reference_now). Anything that cannot
    be read as a date returns None so date-based rules stay quiet.
    """
    if value is None:
        return reference_now or date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return reference_now or date.today()
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def year_end_spike(tx: Transaction, on: Optional[date]) -> Optional[Tuple[int, str]]:
    if tx.type != "sale" or on is None or on.month != YEAR_END_MONTH:
        return None
    amount = _as_float(tx.amount)
    if amount is not None and amount > YEAR_END_SPIKE_AMOUNT:
        return YEAR_END_SPIKE_POINTS, "Layer 1: Sudden high-value March transaction (year-end spike)."
    return None


def undisclosed_related_party(tx: Transaction, on: Optional[date]) -> Optional[Tuple[int, str]]:
    if tx.is_related_party and not tx.is_disclosed:
        return RELATED_PARTY_POINTS, "Layer 2: Undisclosed related-party transaction."
    return None


def cash_reality(tx: Transaction, on: Optional[date]) -> Optional[Tuple[int, str]]:
    if tx.type == "sale" and _as_float(tx.actual_cash_flow) == 0:
        return CASH_REALITY_POINTS, "Layer 3: Revenue recognized without cash receipt."
    return None


def intent_consistency(tx: Transaction, on: Optional[date]) -> Optional[Tuple[int, str]]:
    stated, actual = tx.stated_purpose, tx.actual_usage
    if stated and actual and stated != actual:
        return (
            INTENT_MISMATCH_POINTS,
            f"TICC intent violation: funds for '{stated}' diverted to '{actual}'.",
        )
    return None


# Evaluation order is also the order of risk_factors.
LAYERS: Tuple[Layer, ...] = (
    year_end_spike,
    undisclosed_related_party,
    cash_reality,
    intent_consistency,
)


def score_transaction(tx: Transaction, reference_now: Optional[date] = None) -> RiskAnalysisResult:
    on = resolve_date(tx.date, reference_now)

    factors: List[str] = []
    score = 0
    for layer in LAYERS:
        hit = layer(tx, on)
        if hit is None:
            continue
        points, factor = hit
        score += points
        factors.append(factor)

    score = clamp(score, 0, MAX_SCORE)
    return RiskAnalysisResult(
        transaction_id=tx.id,
        risk_level=risk_level_for(score),
        risk_factors=factors,
        score=score,
    )
