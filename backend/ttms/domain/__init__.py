"""Domain contracts and shared types."""

from backend.ttms.domain.contracts import (  # noqa: F401
    AnalysisResultContract,
    ForensicPayloadContract,
    ForensicReportContract,
    MonthlyStatContract,
    RiskAnalysisResultContract,
    RiskSummaryContract,
)
