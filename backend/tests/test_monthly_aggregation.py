from datetime import date
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.ttms.forensics.entities import Transaction  # noqa: E402
from backend.ttms.forensics.monthly import (  # noqa: E402
    MONTH_NAMES,
    aggregate_monthly,
    round_half_up,
)


def _txn(txn_id: str, on, amount: float, txn_type: str, cash: float, **kwargs) -> Transaction:
    return Transaction(
        id=txn_id,
        date=on,
        amount=amount,
        type=txn_type,
        actual_cash_flow=cash,
        **kwargs,
    )


def test_sample_months_roll_up(sample_transactions):
    stats = aggregate_monthly(sample_transactions)
    by_month = {s.month: s for s in stats}

    assert [s.month for s in stats] == ["January", "February", "March"]

    assert by_month["January"].total_sales == 20_000_000
    assert by_month["January"].total_cash_flow == 17_000_000
    assert by_month["January"].flagged_count == 0
    assert by_month["January"].risk_score == 0

    assert by_month["February"].total_sales == 64_000_000
    assert by_month["February"].flagged_count == 1
    assert by_month["February"].risk_score == 45

    # T-101 (85), T-145 (100), T-TICC-02 (50) -> 235 / 3
    assert by_month["March"].total_sales == 145_000_000
    assert by_month["March"].total_cash_flow == 40_000_000
    assert by_month["March"].flagged_count == 3
    assert by_month["March"].risk_score == 78


def test_cash_flow_counts_every_type():
    stats = aggregate_monthly(
        [
            _txn("s", date(2024, 5, 1), 100.0, "sale", 100.0),
            _txn("p", date(2024, 5, 2), 40.0, "purchase", -40.0),
            _txn("l", date(2024, 5, 3), 500.0, "loan_in", 500.0),
        ]
    )

    assert len(stats) == 1
    assert stats[0].month == "May"
    assert stats[0].total_sales == 100.0
    assert stats[0].total_cash_flow == 560.0


def test_silence_override_without_flagged_transactions():
    stats = aggregate_monthly(
        [
            _txn("big-sale", date(2024, 4, 3), 60_000_000, "sale", 1_000),
            _txn("outflow", date(2024, 4, 9), 6_000, "expense", -6_000),
        ]
    )

    assert stats[0].month == "April"
    assert stats[0].total_sales == 60_000_000
    assert stats[0].total_cash_flow == -5_000
    assert stats[0].flagged_count == 0
    assert stats[0].risk_score >= 85


def test_silence_override_keeps_higher_average():
    stats = aggregate_monthly(
        [
            _txn(
                "hidden", date(2024, 4, 3), 60_000_000, "sale", 10,
                is_related_party=True, is_disclosed=False, stated_purpose="Plant", actual_usage="Debts",
            ),
            _txn("outflow", date(2024, 4, 9), 100, "expense", -1_000),
        ]
    )

    assert stats[0].flagged_count == 1
    assert stats[0].risk_score == 100


def test_average_rounds_half_up():
    stats = aggregate_monthly(
        [
            _txn("a", date(2024, 2, 1), 10.0, "sale", 0),
            _txn(
                "b", date(2024, 2, 2), 10.0, "sale", 0,
                is_related_party=True, is_disclosed=False, stated_purpose="x", actual_usage="y",
            ),
        ]
    )

    # 45 and 100 -> 72.5
    assert stats[0].risk_score == 73
    assert round_half_up(72.5) == 73
    assert round_half_up(72.4) == 72


def test_month_name_buckets_collapse_years():
    stats = aggregate_monthly(
        [
            _txn("a", date(2023, 3, 1), 10.0, "sale", 10.0),
            _txn("b", date(2024, 3, 1), 20.0, "sale", 20.0),
        ]
    )

    assert len(stats) == 1
    assert stats[0].month == "March"
    assert stats[0].total_sales == 30.0


def test_year_month_buckets_sort_chronologically():
    stats = aggregate_monthly(
        [
            _txn("late", date(2024, 3, 1), 20.0, "sale", 20.0),
            _txn("early", date(2023, 12, 1), 10.0, "sale", 10.0),
            _txn("mid", date(2024, 1, 15), 5.0, "sale", 5.0),
        ],
        bucket="year_month",
    )

    assert [s.month for s in stats] == ["2023-12", "2024-01", "2024-03"]


def test_full_year_ordering_and_unknown_months_dropped():
    txns = [_txn(f"t{m}", date(2024, m, 1), 1.0, "sale", 1.0) for m in (12, 7, 1)]

    assert [s.month for s in aggregate_monthly(txns)] == ["January", "July", "December"]
    assert [s.month for s in aggregate_monthly(txns, month_order=("January", "February", "March"))] == ["January"]
    assert len(MONTH_NAMES) == 12


def test_unreadable_dates_are_skipped():
    stats = aggregate_monthly(
        [
            _txn("bad", "not a date", 99.0, "sale", 0),
            _txn("good", date(2024, 6, 1), 1.0, "sale", 1.0),
        ]
    )

    assert [s.month for s in stats] == ["June"]
    assert stats[0].total_sales == 1.0


def test_empty_input():
    assert aggregate_monthly([]) == []
