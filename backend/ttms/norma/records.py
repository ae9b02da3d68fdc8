"""
Norma - record table adapters.

Maps the non-transaction tables (vendors, sales register, cash book, bank
transfers, monthly sales summary) into canonical records and assembles a
RecordSet from a whole payload.

Two input shapes are in circulation and both land on the same entities:
- wizard rows:  {"vendorName": ..., "bankAccountNo": ..., "amount": "1200"}
- legacy rows:  {"Vendor_Name": ..., "Bank_Account_number": ..., "Vendor_ID": 4}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar, Union

from backend.ttms.domain.contracts import ForensicPayloadContract
from backend.ttms.forensics.entities import (
    NOT_APPLICABLE,
    CashFlowRecord,
    MonthlySalesRecord,
    RecordSet,
    SalesRegisterRecord,
    Transaction,
    TransferRecord,
    VendorRecord,
)

from .normalize import (
    RecordNormalizationError,
    map_row,
    normalize_header,
    parse_amount,
    parse_identifier,
    parse_text,
    row_to_transaction,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

VENDOR_COLUMNS: Dict[str, str] = {
    "vendor id": "vendor_id",
    "id": "vendor_id",
    "vendor name": "name",
    "vendor": "name",
    "name": "name",
    "bank account number": "bank_account_number",
    "bank account no": "bank_account_number",
    "account number": "bank_account_number",
    "ifsc code": "ifsc_code",
    "ifsc": "ifsc_code",
    "bank address": "bank_address",
    "gst no": "tax_id",
    "gst or pan": "tax_id",
    "gst": "tax_id",
    "pan": "tax_id",
    "tax id": "tax_id",
}

SALES_REGISTER_COLUMNS: Dict[str, str] = {
    "id": "record_id",
    "sale id": "record_id",
    "invoice id": "record_id",
    "customer name": "customer_name",
    "customer": "customer_name",
    "bank account number": "bank_account_number",
    "bank account no": "bank_account_number",
    "ifsc code": "ifsc_code",
    "location": "location",
    "gst no": "tax_id",
    "gst or pan": "tax_id",
    "tax id": "tax_id",
}

CASH_FLOW_COLUMNS: Dict[str, str] = {
    "date": "date",
    "opening cash": "opening_balance",
    "opening balance": "opening_balance",
    "cash in": "cash_in",
    "cash out": "cash_out",
    "closing cash": "closing_balance",
    "closing balance": "closing_balance",
    "flag": "flag",
    "status": "flag",
}

TRANSFER_COLUMNS: Dict[str, str] = {
    "from account": "from_account",
    "from": "from_account",
    "to account": "to_account",
    "to": "to_account",
    "amount": "amount",
    "remark": "remark",
    "reason": "reason",
}

MONTHLY_SALES_COLUMNS: Dict[str, str] = {
    "month": "month",
    "sales": "sales_amount",
    "sales amount": "sales_amount",
    "amount": "sales_amount",
    "remark": "remark",
}

# Headers that mark a vendor row as a wizard entry that also books a transaction.
_WIZARD_VENDOR_MARKERS = {"transaction id", "amount", "type"}


def _account(value: Any) -> str:
    return parse_text(value) or NOT_APPLICABLE


def row_to_vendor(row: Any, index: int) -> VendorRecord:
    m = map_row(row, VENDOR_COLUMNS)
    return VendorRecord(
        vendor_id=parse_identifier(m.get("vendor_id")) or f"V-{index + 1}",
        name=parse_text(m.get("name")) or "Unknown",
        bank_account_number=_account(m.get("bank_account_number")),
        ifsc_code=_account(m.get("ifsc_code")),
        bank_address=parse_text(m.get("bank_address")) or "",
        tax_id=parse_text(m.get("tax_id")) or "",
    )


def vendor_row_books_transaction(row: Any) -> bool:
    if not isinstance(row, Mapping):
        return False
    return any(normalize_header(k) in _WIZARD_VENDOR_MARKERS for k in row)


def vendor_row_to_transaction(row: Any, index: int, today: Optional[date] = None) -> Transaction:
    """
    Wizard vendor entries carry the booked amount too. Their own row id names
    the vendor line; transactionId (when present) names the transaction.
    """
    if not isinstance(row, Mapping):
        raise RecordNormalizationError(f"Expected a mapping row, got {type(row).__name__}")

    headers = {normalize_header(k): k for k in row}
    txn_row: Dict[str, Any] = {k: v for k, v in row.items() if normalize_header(k) != "id"}
    if "transaction id" not in headers and "id" in headers:
        txn_row["transaction id"] = row[headers["id"]]
    return row_to_transaction(txn_row, index, today)


def row_to_sales_record(row: Any, index: int) -> SalesRegisterRecord:
    m = map_row(row, SALES_REGISTER_COLUMNS)
    return SalesRegisterRecord(
        record_id=parse_identifier(m.get("record_id")) or "",
        customer_name=parse_text(m.get("customer_name")) or "Unknown",
        bank_account_number=_account(m.get("bank_account_number")),
        ifsc_code=_account(m.get("ifsc_code")),
        location=parse_text(m.get("location")) or "",
        tax_id=parse_text(m.get("tax_id")) or "",
    )


def row_to_cash_flow(row: Any, index: int) -> CashFlowRecord:
    m = map_row(row, CASH_FLOW_COLUMNS)
    return CashFlowRecord(
        date=parse_text(m.get("date")) or "",
        opening_balance=parse_amount(m.get("opening_balance")),
        cash_in=parse_amount(m.get("cash_in")),
        cash_out=parse_amount(m.get("cash_out")),
        closing_balance=parse_amount(m.get("closing_balance")),
        flag=parse_text(m.get("flag")) or "OK",
    )


def row_to_transfer(row: Any, index: int) -> TransferRecord:
    m = map_row(row, TRANSFER_COLUMNS)
    return TransferRecord(
        from_account=parse_text(m.get("from_account")) or "",
        to_account=parse_text(m.get("to_account")) or "",
        amount=parse_amount(m.get("amount")),
        remark=parse_text(m.get("remark")) or "",
        reason=parse_text(m.get("reason")),
    )


def row_to_monthly_sales(row: Any, index: int) -> MonthlySalesRecord:
    m = map_row(row, MONTHLY_SALES_COLUMNS)
    return MonthlySalesRecord(
        month=parse_text(m.get("month")) or f"M{index + 1}",
        sales_amount=parse_amount(m.get("sales_amount")),
        remark=parse_text(m.get("remark")),
    )


@dataclass(frozen=True)
class NormalizedPayload:
    records: RecordSet
    skipped_rows: int


def _convert(
    table: str,
    rows: Iterable[Any],
    convert: Callable[[Any, int], T],
    skipped: List[str],
) -> List[T]:
    out: List[T] = []
    for i, row in enumerate(rows):
        try:
            out.append(convert(row, i))
        except RecordNormalizationError as exc:
            logger.warning("[norma] skipped %s row %s: %s", table, i, exc)
            skipped.append(f"{table}[{i}]")
    return out


def normalize_payload(
    payload: Union[ForensicPayloadContract, Mapping[str, Any]],
    *,
    today: Optional[date] = None,
) -> NormalizedPayload:
    """
    Build a RecordSet from every table in the payload.

    Bad rows are logged and skipped; the rest of the tables still normalize.
    """
    contract = payload if isinstance(payload, ForensicPayloadContract) else ForensicPayloadContract.model_validate(payload)
    skipped: List[str] = []

    transactions = _convert(
        "transactions",
        contract.transactions,
        lambda row, i: row_to_transaction(row, i, today),
        skipped,
    )

    wizard_vendor_rows = [row for row in contract.vendors if vendor_row_books_transaction(row)]
    offset = len(transactions)
    transactions.extend(
        _convert(
            "vendors",
            wizard_vendor_rows,
            lambda row, i: vendor_row_to_transaction(row, offset + i, today),
            skipped,
        )
    )

    records = RecordSet(
        transactions=transactions,
        vendors=_convert("vendors", contract.vendors, row_to_vendor, skipped),
        sales_register=_convert("sales_register", contract.sales_register, row_to_sales_record, skipped),
        cash_flow=_convert("cash_flow", contract.cash_flow, row_to_cash_flow, skipped),
        transfers=_convert("transfers", contract.transfers, row_to_transfer, skipped),
        sales_summary=_convert("sales_summary", contract.sales_summary, row_to_monthly_sales, skipped),
    )
    return NormalizedPayload(records=records, skipped_rows=len(skipped))
