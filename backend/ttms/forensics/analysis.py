from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Literal, Optional

from .entities import RecordSet, SalesRegisterRecord, Transaction, VendorRecord
from .monthly import round_half_up
from .patterns import (
    CashFlowAnomaly,
    CircularTrade,
    DuplicatePair,
    SalesSpike,
    SpikeMode,
    detect_circular_trading,
    detect_duplicate_sales,
    detect_duplicate_vendors,
    detect_sales_spikes,
    reconcile_cash_flow,
)
from .risk import RiskAnalysisResult, score_transaction

SystemStatus = Literal["critical", "secure"]

CRITICAL_AVERAGE_SCORE = 50


@dataclass(frozen=True)
class AnalysisResult:
    duplicate_vendors: List[DuplicatePair[VendorRecord]]
    duplicate_sales: List[DuplicatePair[SalesRegisterRecord]]
    cash_flow_anomalies: List[CashFlowAnomaly]
    circular_trading: List[CircularTrade]
    sales_spikes: List[SalesSpike]

    @property
    def finding_count(self) -> int:
        return (
            len(self.duplicate_vendors)
            + len(self.duplicate_sales)
            + len(self.cash_flow_anomalies)
            + len(self.circular_trading)
            + len(self.sales_spikes)
        )


@dataclass(frozen=True)
class RiskSummary:
    total_transactions: int
    flagged_count: int
    average_risk_score: int
    status: SystemStatus


def run_pattern_scans(records: RecordSet, *, spike_mode: SpikeMode = "compute") -> AnalysisResult:
    return AnalysisResult(
        duplicate_vendors=detect_duplicate_vendors(records.vendors),
        duplicate_sales=detect_duplicate_sales(records.sales_register),
        cash_flow_anomalies=reconcile_cash_flow(records.cash_flow),
        circular_trading=detect_circular_trading(records.transfers),
        sales_spikes=detect_sales_spikes(records.sales_summary, mode=spike_mode),
    )


def score_transactions(
    transactions: Iterable[Transaction],
    reference_now: Optional[date] = None,
) -> List[RiskAnalysisResult]:
    return [score_transaction(tx, reference_now) for tx in transactions]


def flag_transactions(results: Iterable[RiskAnalysisResult]) -> List[RiskAnalysisResult]:
    """Non-Low results, highest score first (ties keep input order)."""
    flagged = [r for r in results if r.risk_level != "Low"]
    return sorted(flagged, key=lambda r: r.score, reverse=True)


def summarize_risk(total_transactions: int, flagged: List[RiskAnalysisResult]) -> RiskSummary:
    if flagged:
        average = round_half_up(sum(r.score for r in flagged) / len(flagged))
    else:
        average = 0
    status: SystemStatus = "critical" if average > CRITICAL_AVERAGE_SCORE else "secure"
    return RiskSummary(
        total_transactions=total_transactions,
        flagged_count=len(flagged),
        average_risk_score=average,
        status=status,
    )
