from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.ttms.forensics.analysis import run_pattern_scans  # noqa: E402
from backend.ttms.forensics.entities import (  # noqa: E402
    CashFlowRecord,
    MonthlySalesRecord,
    SalesRegisterRecord,
    TransferRecord,
    VendorRecord,
)
from backend.ttms.forensics.patterns import (  # noqa: E402
    annotate_sales_spikes,
    declared_cash_flow_issues,
    detect_circular_trading,
    detect_duplicate_sales,
    detect_duplicate_vendors,
    detect_sales_spikes,
    find_duplicates,
    reconcile_cash_flow,
)


def _vendor(vendor_id: str, account: str) -> VendorRecord:
    return VendorRecord(vendor_id=vendor_id, name=f"Vendor {vendor_id}", bank_account_number=account)


def _cash(opening, cash_in, cash_out, closing, flag="OK", on="2025-01-05") -> CashFlowRecord:
    return CashFlowRecord(
        date=on,
        opening_balance=opening,
        cash_in=cash_in,
        cash_out=cash_out,
        closing_balance=closing,
        flag=flag,
    )


def test_duplicate_vendors_skip_not_applicable_accounts():
    vendors = [_vendor("1", "X"), _vendor("2", "N/A"), _vendor("3", "X")]

    pairs = detect_duplicate_vendors(vendors)

    assert len(pairs) == 1
    assert pairs[0].original.vendor_id == "1"
    assert pairs[0].duplicate.vendor_id == "3"


def test_duplicate_vendors_never_pair_sentinel_or_blank_accounts():
    vendors = [_vendor("1", "N/A"), _vendor("2", "N/A"), _vendor("3", ""), _vendor("4", "")]

    assert detect_duplicate_vendors(vendors) == []


def test_every_later_sighting_pairs_with_first_seen():
    vendors = [_vendor("1", "X"), _vendor("2", "X"), _vendor("3", "X")]

    pairs = detect_duplicate_vendors(vendors)

    assert [(p.original.vendor_id, p.duplicate.vendor_id) for p in pairs] == [("1", "2"), ("1", "3")]


def test_duplicate_sales_keyed_by_record_id():
    records = [
        SalesRegisterRecord(record_id="101", customer_name="ABC Traders"),
        SalesRegisterRecord(record_id="102", customer_name="XYZ Corp"),
        SalesRegisterRecord(record_id="101", customer_name="ABC Traders (re-entered)"),
        SalesRegisterRecord(record_id="", customer_name="No id"),
        SalesRegisterRecord(record_id="", customer_name="No id either"),
    ]

    pairs = detect_duplicate_sales(records)

    assert len(pairs) == 1
    assert pairs[0].duplicate.customer_name == "ABC Traders (re-entered)"


def test_find_duplicates_with_custom_key():
    pairs = find_duplicates(["a", "b", "A"], key=str.lower)

    assert [(p.original, p.duplicate) for p in pairs] == [("a", "A")]


def test_cash_flow_reconciles():
    assert reconcile_cash_flow([_cash(200000, 50000, 30000, 220000)]) == []


def test_cash_flow_mismatch_reports_signed_difference():
    anomalies = reconcile_cash_flow([_cash(200000, 50000, 30000, 160000, flag="Cash Missing")])

    assert len(anomalies) == 1
    anomaly = anomalies[0]
    assert anomaly.date == "2025-01-05"
    assert anomaly.expected == 220000
    assert anomaly.actual == 160000
    assert anomaly.difference == -60000
    assert anomaly.flag == "Cash Missing"


def test_cash_flow_float_noise_is_not_an_anomaly():
    # 0.1 + 0.2 != 0.3 in binary floating point
    assert reconcile_cash_flow([_cash(0.1, 0.2, 0.0, 0.3)]) == []


def test_declared_cash_issues_ignore_ok_in_any_case():
    records = [
        _cash(1, 0, 0, 1, flag="OK"),
        _cash(1, 0, 0, 1, flag="ok"),
        _cash(1, 0, 0, 1, flag=" Ok "),
        _cash(1, 0, 0, 1, flag="Cash Missing", on="2025-01-06"),
    ]

    issues = declared_cash_flow_issues(records)

    assert [r.date for r in issues] == ["2025-01-06"]


def test_circular_trade_within_tolerance():
    cycles = detect_circular_trading(
        [
            TransferRecord(from_account="A", to_account="B", amount=100000),
            TransferRecord(from_account="B", to_account="A", amount=98000),
        ]
    )

    assert len(cycles) == 1
    assert cycles[0].cycle == ("A", "B", "A")
    assert cycles[0].amount == 100000
    assert cycles[0].legs == (0, 1)


def test_circular_trade_outside_tolerance():
    cycles = detect_circular_trading(
        [
            TransferRecord(from_account="A", to_account="B", amount=100000),
            TransferRecord(from_account="B", to_account="A", amount=80000),
        ]
    )

    assert cycles == []


def test_circular_tolerance_uses_first_leg_only():
    # |100000 - 105200| = 5200 > 5% of 100000
    forward = [
        TransferRecord(from_account="A", to_account="B", amount=100000),
        TransferRecord(from_account="B", to_account="A", amount=105200),
    ]
    # same legs swapped: 5200 <= 5% of 105200
    swapped = [forward[1], forward[0]]

    assert detect_circular_trading(forward) == []
    assert len(detect_circular_trading(swapped)) == 1


def test_circular_trade_tolerance_is_inclusive():
    cycles = detect_circular_trading(
        [
            TransferRecord(from_account="A", to_account="B", amount=100000),
            TransferRecord(from_account="B", to_account="A", amount=95000),
        ]
    )

    assert len(cycles) == 1


def test_external_legs_never_form_cycles():
    cycles = detect_circular_trading(
        [
            TransferRecord(from_account="BANK LOAN", to_account="", amount=1000000),
            TransferRecord(from_account="", to_account="BANK LOAN", amount=1000000),
        ]
    )

    assert cycles == []


def test_same_direction_legs_are_not_a_cycle():
    cycles = detect_circular_trading(
        [
            TransferRecord(from_account="A", to_account="B", amount=100),
            TransferRecord(from_account="A", to_account="B", amount=100),
        ]
    )

    assert cycles == []


def test_sales_spike_computed_from_mean():
    records = [
        MonthlySalesRecord(month="APR", sales_amount=100),
        MonthlySalesRecord(month="MAY", sales_amount=100),
        MonthlySalesRecord(month="JUN", sales_amount=400),
    ]

    spikes = detect_sales_spikes(records, mode="compute")

    # mean 200, threshold 300
    assert [s.month for s in spikes] == ["JUN"]
    assert spikes[0].growth == "HIGH JUMP"
    assert spikes[0].ratio_to_mean == 2.0


def test_sales_spike_threshold_is_strict():
    records = [
        MonthlySalesRecord(month="A", sales_amount=50),
        MonthlySalesRecord(month="B", sales_amount=50),
        MonthlySalesRecord(month="C", sales_amount=50),
        MonthlySalesRecord(month="D", sales_amount=150),
    ]

    # mean 75, threshold 112.5 -> only D
    assert [s.month for s in detect_sales_spikes(records)] == ["D"]
    assert detect_sales_spikes([MonthlySalesRecord(month="A", sales_amount=10)]) == []


def test_sales_spike_trusts_upstream_remark():
    records = [
        MonthlySalesRecord(month="APR", sales_amount=100),
        MonthlySalesRecord(month="JUN", sales_amount=120, remark="HIGH JUMP"),
        MonthlySalesRecord(month="JUL", sales_amount=900),
    ]

    spikes = detect_sales_spikes(records, mode="remark")

    assert [(s.month, s.growth) for s in spikes] == [("JUN", "HIGH JUMP")]
    assert spikes[0].ratio_to_mean is None


def test_annotate_sales_spikes_returns_new_records():
    records = [
        MonthlySalesRecord(month="APR", sales_amount=100),
        MonthlySalesRecord(month="MAY", sales_amount=100),
        MonthlySalesRecord(month="JUN", sales_amount=400),
    ]

    annotated = annotate_sales_spikes(records)

    assert [r.remark for r in annotated] == [None, None, "HIGH JUMP"]
    assert records[2].remark is None
    assert [s.month for s in detect_sales_spikes(annotated, mode="remark")] == ["JUN"]


def test_empty_inputs_yield_empty_findings():
    assert detect_duplicate_vendors([]) == []
    assert detect_duplicate_sales([]) == []
    assert reconcile_cash_flow([]) == []
    assert detect_circular_trading([]) == []
    assert detect_sales_spikes([]) == []
    assert detect_sales_spikes([], mode="remark") == []


def test_sample_record_set_findings(sample_records):
    result = run_pattern_scans(sample_records)

    assert len(result.duplicate_vendors) == 1
    pair = result.duplicate_vendors[0]
    assert (pair.original.vendor_id, pair.duplicate.vendor_id) == ("1", "4")

    # sales register ids are all distinct
    assert result.duplicate_sales == []

    # every sample cash day actually reconciles; the "Cash Missing" flags are declarations only
    assert result.cash_flow_anomalies == []
    assert len(declared_cash_flow_issues(sample_records.cash_flow)) == 3

    assert [(c.cycle, c.amount) for c in result.circular_trading] == [
        (("Company A", "Vendor X", "Company A"), 100000.0),
        (("Vendor X", "Company A", "Vendor X"), 98000.0),
    ]

    assert [s.month for s in result.sales_spikes] == ["NOV"]


def test_sample_spikes_in_remark_mode(sample_records):
    result = run_pattern_scans(sample_records, spike_mode="remark")

    assert [s.month for s in result.sales_spikes] == ["JUNE", "NOV"]


def test_scans_are_idempotent_and_do_not_mutate(sample_records):
    before = [list(sample_records.vendors), list(sample_records.transfers), list(sample_records.sales_summary)]

    first = run_pattern_scans(sample_records)
    second = run_pattern_scans(sample_records)

    assert first == second
    assert repr(first) == repr(second)
    assert [list(sample_records.vendors), list(sample_records.transfers), list(sample_records.sales_summary)] == before
