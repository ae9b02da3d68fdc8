from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional, Union

from backend.ttms.config import is_dev_env, month_bucket_mode, spike_detection_mode
from backend.ttms.domain.contracts import (
    ForensicPayloadContract,
    ForensicReportContract,
    ForensicReportMeta,
)
from backend.ttms.forensics.adapters import (
    analysis_to_contract,
    cash_issue_to_dict,
    monthly_stat_to_contract,
    risk_results_to_contracts,
    summary_to_contract,
)
from backend.ttms.forensics.analysis import (
    flag_transactions,
    run_pattern_scans,
    score_transactions,
    summarize_risk,
)
from backend.ttms.forensics.entities import RecordSet
from backend.ttms.forensics.monthly import aggregate_monthly
from backend.ttms.forensics.patterns import declared_cash_flow_issues
from backend.ttms.norma.records import normalize_payload

logger = logging.getLogger(__name__)


def analyze_records(
    records: RecordSet,
    *,
    reference_now: Optional[date] = None,
    spike_mode: Optional[str] = None,
    month_bucket: Optional[str] = None,
    skipped_rows: int = 0,
) -> ForensicReportContract:
    """
    Run every analysis over an already normalized RecordSet.

    The per-transaction scorer, the monthly rollup and the pattern scans are
    independent; this is the only place their outputs meet.
    """
    spike_mode = spike_detection_mode(spike_mode)
    month_bucket = month_bucket_mode(month_bucket)

    results = score_transactions(records.transactions, reference_now)
    flagged = flag_transactions(results)
    summary = summarize_risk(len(results), flagged)
    monthly = aggregate_monthly(records.transactions, bucket=month_bucket, reference_now=reference_now)
    analysis = run_pattern_scans(records, spike_mode=spike_mode)
    cash_issues = declared_cash_flow_issues(records.cash_flow)

    logger.debug(
        "[forensics] scored=%s flagged=%s months=%s findings=%s",
        len(results),
        len(flagged),
        len(monthly),
        analysis.finding_count,
    )
    if is_dev_env() and analysis.cash_flow_anomalies:
        for anomaly in analysis.cash_flow_anomalies:
            logger.warning(
                "[forensics] cash book does not reconcile date=%s expected=%s actual=%s flag=%s",
                anomaly.date,
                anomaly.expected,
                anomaly.actual,
                anomaly.flag,
            )

    return ForensicReportContract(
        transactions=risk_results_to_contracts(results),
        flagged_transactions=risk_results_to_contracts(flagged),
        monthly_stats=[monthly_stat_to_contract(m) for m in monthly],
        analysis=analysis_to_contract(analysis),
        summary=summary_to_contract(summary),
        declared_cash_issues=[cash_issue_to_dict(r) for r in cash_issues],
        meta=ForensicReportMeta(
            as_of=reference_now.isoformat() if reference_now else None,
            spike_mode=spike_mode,
            month_bucket=month_bucket,
            skipped_rows=skipped_rows,
        ),
    )


def build_forensic_report(
    payload: Union[ForensicPayloadContract, Mapping[str, Any]],
    *,
    reference_now: Optional[date] = None,
    spike_mode: Optional[str] = None,
    month_bucket: Optional[str] = None,
) -> ForensicReportContract:
    """Normalize raw record tables, then analyze them."""
    normalized = normalize_payload(payload, today=reference_now)
    if normalized.skipped_rows:
        logger.warning("[forensics] %s input rows could not be normalized and were skipped", normalized.skipped_rows)

    return analyze_records(
        normalized.records,
        reference_now=reference_now,
        spike_mode=spike_mode,
        month_bucket=month_bucket,
        skipped_rows=normalized.skipped_rows,
    )
