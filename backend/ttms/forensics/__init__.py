"""Forensic analysis engine: per-transaction risk layers and cross-record scans."""

from backend.ttms.forensics.analysis import (  # noqa: F401
    AnalysisResult,
    RiskSummary,
    flag_transactions,
    run_pattern_scans,
    score_transactions,
    summarize_risk,
)
from backend.ttms.forensics.entities import (  # noqa: F401
    CashFlowRecord,
    MonthlySalesRecord,
    RecordSet,
    SalesRegisterRecord,
    Transaction,
    TransferRecord,
    VendorRecord,
)
from backend.ttms.forensics.monthly import MonthlyStat, aggregate_monthly  # noqa: F401
from backend.ttms.forensics.risk import RiskAnalysisResult, score_transaction  # noqa: F401
