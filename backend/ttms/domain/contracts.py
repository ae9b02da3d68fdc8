from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

logger = logging.getLogger(__name__)


Row = Any


class ForensicPayloadContract(BaseModel):
    """
    Raw record tables handed over by the data-entry / upload layer.

    Rows stay loosely typed here; the normalizer maps their headers.
    """
    model_config = ConfigDict(populate_by_name=True)

    transactions: List[Row] = Field(default_factory=list)
    vendors: List[Row] = Field(default_factory=list)
    sales_register: List[Row] = Field(
        default_factory=list,
        validation_alias=AliasChoices("sales_register", "salesRegister"),
    )
    cash_flow: List[Row] = Field(
        default_factory=list,
        validation_alias=AliasChoices("cash_flow", "cashFlow"),
    )
    transfers: List[Row] = Field(
        default_factory=list,
        validation_alias=AliasChoices("transfers", "bankStatement", "bankDetails", "bank_statement"),
    )
    sales_summary: List[Row] = Field(
        default_factory=list,
        validation_alias=AliasChoices("sales_summary", "salesSummary"),
    )

    @field_validator(
        "transactions",
        "vendors",
        "sales_register",
        "cash_flow",
        "transfers",
        "sales_summary",
        mode="before",
    )
    @classmethod
    def _table_or_empty(cls, value: Any, info: ValidationInfo) -> Any:
        # Form state sends null for tables the user never opened.
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        logger.warning(
            "[contracts] %s is a %s, not a list of rows; treating it as empty",
            info.field_name,
            type(value).__name__,
        )
        return []


class RiskAnalysisResultContract(BaseModel):
    transaction_id: str
    risk_level: str
    risk_factors: List[str]
    score: int


class MonthlyStatContract(BaseModel):
    month: str
    total_sales: float
    total_cash_flow: float
    risk_score: int
    flagged_count: int


class DuplicatePairContract(BaseModel):
    original: Dict[str, Any]
    duplicate: Dict[str, Any]


class CashFlowAnomalyContract(BaseModel):
    date: str
    expected: float
    actual: float
    difference: float
    flag: str = ""


class CircularTradeContract(BaseModel):
    cycle: List[str]
    amount: float
    legs: List[int]


class SalesSpikeContract(BaseModel):
    month: str
    amount: float
    growth: str
    ratio_to_mean: Optional[float] = None


class AnalysisResultContract(BaseModel):
    duplicate_vendors: List[DuplicatePairContract]
    duplicate_sales: List[DuplicatePairContract]
    cash_flow_anomalies: List[CashFlowAnomalyContract]
    circular_trading: List[CircularTradeContract]
    sales_spikes: List[SalesSpikeContract]


class RiskSummaryContract(BaseModel):
    total_transactions: int
    flagged_count: int
    average_risk_score: int
    status: str


class ForensicReportMeta(BaseModel):
    as_of: Optional[str] = None
    spike_mode: str
    month_bucket: str
    skipped_rows: int = 0


class ForensicReportContract(BaseModel):
    transactions: List[RiskAnalysisResultContract]
    flagged_transactions: List[RiskAnalysisResultContract]
    monthly_stats: List[MonthlyStatContract]
    analysis: AnalysisResultContract
    summary: RiskSummaryContract
    declared_cash_issues: List[Dict[str, Any]]
    meta: ForensicReportMeta
