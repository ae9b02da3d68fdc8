from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from backend.ttms.domain.contracts import (
    AnalysisResultContract,
    CashFlowAnomalyContract,
    CircularTradeContract,
    DuplicatePairContract,
    MonthlyStatContract,
    RiskAnalysisResultContract,
    RiskSummaryContract,
    SalesSpikeContract,
)
from backend.ttms.forensics.analysis import AnalysisResult, RiskSummary
from backend.ttms.forensics.entities import CashFlowRecord
from backend.ttms.forensics.monthly import MonthlyStat
from backend.ttms.forensics.patterns import CircularTrade, DuplicatePair
from backend.ttms.forensics.risk import RiskAnalysisResult


def risk_result_to_contract(result: RiskAnalysisResult) -> RiskAnalysisResultContract:
    return RiskAnalysisResultContract(**asdict(result))


def monthly_stat_to_contract(stat: MonthlyStat) -> MonthlyStatContract:
    return MonthlyStatContract(**asdict(stat))


def _pair_to_contract(pair: DuplicatePair) -> DuplicatePairContract:
    return DuplicatePairContract(original=asdict(pair.original), duplicate=asdict(pair.duplicate))


def _cycle_to_contract(trade: CircularTrade) -> CircularTradeContract:
    return CircularTradeContract(cycle=list(trade.cycle), amount=trade.amount, legs=list(trade.legs))


def analysis_to_contract(result: AnalysisResult) -> AnalysisResultContract:
    return AnalysisResultContract(
        duplicate_vendors=[_pair_to_contract(p) for p in result.duplicate_vendors],
        duplicate_sales=[_pair_to_contract(p) for p in result.duplicate_sales],
        cash_flow_anomalies=[CashFlowAnomalyContract(**asdict(a)) for a in result.cash_flow_anomalies],
        circular_trading=[_cycle_to_contract(c) for c in result.circular_trading],
        sales_spikes=[SalesSpikeContract(**asdict(s)) for s in result.sales_spikes],
    )


def summary_to_contract(summary: RiskSummary) -> RiskSummaryContract:
    return RiskSummaryContract(**asdict(summary))


def cash_issue_to_dict(record: CashFlowRecord) -> Dict[str, Any]:
    return asdict(record)


def risk_results_to_contracts(results: List[RiskAnalysisResult]) -> List[RiskAnalysisResultContract]:
    return [risk_result_to_contract(r) for r in results]
