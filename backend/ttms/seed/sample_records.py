"""
Sample forensic records.

Two flavours of the same demo company:
- sample_transactions(): canonical transactions spanning Jan-Mar with the
  March fraud spike, the undisclosed related party and the diverted loan.
- sample_user_payload(): the legacy record tables as raw rows, exactly the
  shape the upload layer used to hand over. Run them through
  norma.records.normalize_payload, or use sample_record_set() directly.

Nothing here is module-level state: every call builds fresh objects.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from backend.ttms.forensics.entities import RecordSet, Transaction
from backend.ttms.norma.records import normalize_payload


def _txn(
    txn_id: str,
    on: date,
    amount: float,
    txn_type: str,
    party: str,
    category: str,
    cash: float,
    *,
    related: bool = False,
    disclosed: bool = True,
    stated_purpose: Optional[str] = None,
    actual_usage: Optional[str] = None,
) -> Transaction:
    return Transaction(
        id=txn_id,
        date=on,
        amount=amount,
        type=txn_type,  # type: ignore[arg-type]
        counterparty_name=party,
        category=category,
        is_related_party=related,
        is_disclosed=disclosed,
        actual_cash_flow=cash,
        stated_purpose=stated_purpose,
        actual_usage=actual_usage,
    )


def sample_transactions() -> List[Transaction]:
    return [
        # January: normal activity
        _txn("T-JAN-01", date(2024, 1, 5), 5_000_000, "sale", "Standard Client A", "Revenue", 5_000_000),
        _txn("T-JAN-02", date(2024, 1, 12), 3_000_000, "purchase", "Vendor X", "COGS", -3_000_000),
        _txn("T-JAN-03", date(2024, 1, 20), 15_000_000, "sale", "Retail Chain B", "Revenue", 15_000_000),
        # February: minor irregularities
        _txn("T-FEB-01", date(2024, 2, 10), 22_000_000, "sale", "Tech Corp", "Revenue", 22_000_000),
        _txn("T-162", date(2024, 2, 25), 42_000_000, "sale", "Global Impex", "Revenue", 0),
        # March: the year-end spike
        _txn("T-101", date(2024, 3, 28), 80_000_000, "sale", "Viper Holdings", "Revenue", 0),
        _txn(
            "T-145", date(2024, 3, 29), 65_000_000, "sale", "ABC Traders", "Revenue", 0,
            related=True, disclosed=False,
        ),
        _txn(
            "T-TICC-01", date(2024, 3, 15), 100_000_000, "loan_in", "City Bank", "Financial", 100_000_000,
            stated_purpose="New Factory Construction",
        ),
        _txn(
            "T-TICC-02", date(2024, 3, 16), 40_000_000, "expense", "Promoter Shell Co", "Operational", -40_000_000,
            related=True, disclosed=False, actual_usage="Paying Old Debts",
        ),
        _txn(
            "T-TICC-03", date(2024, 3, 18), 20_000_000, "expense", "Staff Payroll", "Operational", -20_000_000,
            actual_usage="Salaries",
        ),
    ]


def sample_user_payload() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "vendors": [
            {"Vendor_ID": 1, "Vendor_Name": "Rajesh Kumar Sharma", "Bank_Account_number": "987654-321012",
             "IFSC_CODE": "SBIN0001234", "BANK_ADDRESS": "Pali Main Branch, Rajasthan", "GST_No": "08AAAAA0000A1Z5"},
            {"Vendor_ID": 2, "Vendor_Name": "Amit Singh", "Bank_Account_number": "501001-234567",
             "IFSC_CODE": "HDFC0000456", "BANK_ADDRESS": "Mumbai, Maharashtra", "GST_No": "27AAAAA0000A1Z5"},
            {"Vendor_ID": 3, "Vendor_Name": "Priya Verma", "Bank_Account_number": "40500-0123456",
             "IFSC_CODE": "ICIC0000004", "BANK_ADDRESS": "Delhi, Connaught Place", "GST_No": "07BBBBB1111B1Z2"},
            {"Vendor_ID": 4, "Vendor_Name": "Rajesh Kumar Sharma", "Bank_Account_number": "987654-321012",
             "IFSC_CODE": "SBIN0001234", "BANK_ADDRESS": "Pali Main Branch, Rajasthan", "GST_No": "08AAAAA0000A1Z5"},
            {"Vendor_ID": 5, "Vendor_Name": "Suresh bhati", "Bank_Account_number": "N/A",
             "IFSC_CODE": "N/A", "BANK_ADDRESS": "JODHPUR", "GST_No": "NA"},
        ],
        "salesRegister": [
            {"ID": 101, "Customer_Name": "ABC Traders", "Bank_Account_number": "30210015000123",
             "IFSC_CODE": "PUNB0302100", "Location": "Jodhpur, Rajasthan", "GST_No": "08CCCCC2222C1Z9"},
            {"ID": 102, "Customer_Name": "XYZ Corp", "Bank_Account_number": "12340100012345",
             "IFSC_CODE": "BARB0PAL0XX", "Location": "Pali, Rajasthan", "GST_No": "08DDDDD3333D1Z0"},
            {"ID": 103, "Customer_Name": "Dummy Customer", "Bank_Account_number": "915010045678901",
             "IFSC_CODE": "UTIB0000123", "Location": "Bangalore, Karnataka", "GST_No": "29EEEEE4444E1Z7"},
            {"ID": 104, "Customer_Name": "cbd company", "Bank_Account_number": "N/A",
             "IFSC_CODE": "N/A", "Location": "N/A", "GST_No": "N/A"},
            {"ID": 105, "Customer_Name": "ABC Traders", "Bank_Account_number": "30210015000123",
             "IFSC_CODE": "PUNB0302100", "Location": "Jodhpur, Rajasthan", "GST_No": "08CCCCC2222C1Z9"},
            {"ID": 106, "Customer_Name": "XYZ Corp", "Bank_Account_number": "12340100012345",
             "IFSC_CODE": "BARB0PAL0XX", "Location": "Pali, Rajasthan", "GST_No": "08DDDDD3333D1Z0"},
        ],
        "cashFlow": [
            {"Date": "2025-01-05", "Opening_Cash": 200000, "Cash_In": 50000, "Cash_Out": 30000,
             "Closing_Cash": 220000, "Flag": "OK"},
            {"Date": "2025-01-06", "Opening_Cash": 220000, "Cash_In": 90000, "Cash_Out": 150000,
             "Closing_Cash": 160000, "Flag": "Cash Missing"},
            {"Date": "2025-01-07", "Opening_Cash": 160000, "Cash_In": 80000, "Cash_Out": 120000,
             "Closing_Cash": 120000, "Flag": "Cash Missing"},
            {"Date": "2025-01-08", "Opening_Cash": 120000, "Cash_In": 80000, "Cash_Out": 60000,
             "Closing_Cash": 140000, "Flag": "ok"},
            {"Date": "2025-01-09", "Opening_Cash": 140000, "Cash_In": 70000, "Cash_Out": 90000,
             "Closing_Cash": 120000, "Flag": "Cash Missing"},
        ],
        "bankStatement": [
            {"From_Account": "Company A", "To_Account": "Vendor X", "Amount": 100000, "Remark": "Payment"},
            {"From_Account": "Vendor X", "To_Account": "Company A", "Amount": 98000, "Remark": "Returned"},
            {"From_Account": "Company A", "To_Account": "Vendor X", "Amount": 100000, "Remark": "Repeated Cycle"},
            {"From_Account": "BANK LOAN", "To_Account": "", "Amount": 1000000, "Remark": "RECEIVED",
             "Reason": "MANUFACTURING"},
            {"From_Account": "PAD SALARY", "To_Account": "", "Amount": 500000, "Remark": "Payment",
             "Reason": "SALARY"},
            {"From_Account": "OLD DEBTS", "To_Account": "", "Amount": 500000, "Remark": "Payment",
             "Reason": "OLD DUE CLEARING"},
        ],
        "salesSummary": [
            {"Month": "APR", "Sales": 45000},
            {"Month": "MAY", "Sales": 50000},
            {"Month": "JUNE", "Sales": 120000, "Remark": "HIGH JUMP"},
            {"Month": "JULY", "Sales": 60000},
            {"Month": "AUG", "Sales": 65000},
            {"Month": "NOV", "Sales": 1000000, "Remark": "HIGH JUMP"},
            {"Month": "DEC", "Sales": 70000},
        ],
    }


def sample_record_set() -> RecordSet:
    """The legacy tables normalized, plus the canonical sample transactions."""
    normalized = normalize_payload(sample_user_payload())
    records = normalized.records
    return RecordSet(
        transactions=sample_transactions(),
        vendors=records.vendors,
        sales_register=records.sales_register,
        cash_flow=records.cash_flow,
        transfers=records.transfers,
        sales_summary=records.sales_summary,
    )
