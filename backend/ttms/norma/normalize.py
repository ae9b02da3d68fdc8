"""
Norma - normalization layer.

Responsibility:
- Turn loosely shaped input rows (wizard form state, spreadsheet rows with
  free-form headers, legacy sample tables) into canonical forensic entities.
- Coerce values the way the upload screen always has:
  - amounts: strip currency symbols / separators, non-numeric -> 0
  - booleans: yes / true / 1 / y
  - transaction types: loose keyword match, default "sale"

Design notes:
- Rows arrive already parsed (dicts). This module never opens files.
- Pure apart from logging: no global state mutation.
- Coercion never raises; only a row that is not a mapping at all does.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from backend.ttms.forensics.entities import Transaction, TransactionType

logger = logging.getLogger(__name__)


class RecordNormalizationError(ValueError):
    pass


# -------------------------
# Header mapping
# -------------------------

TRANSACTION_COLUMNS: Dict[str, str] = {
    "transaction id": "id",
    "id": "id",
    "txn id": "id",
    "date": "date",
    "transaction date": "date",
    "txn date": "date",
    "amount": "amount",
    "value": "amount",
    "type": "type",
    "transaction type": "type",
    "txn type": "type",
    "party name": "counterparty_name",
    "party": "counterparty_name",
    "customer": "counterparty_name",
    "vendor": "counterparty_name",
    "vendor name": "counterparty_name",
    "counterparty": "counterparty_name",
    "counterparty name": "counterparty_name",
    "category": "category",
    "head": "category",
    "account head": "category",
    "related party": "is_related_party",
    "is related party": "is_related_party",
    "related": "is_related_party",
    "disclosed": "is_disclosed",
    "is disclosed": "is_disclosed",
    "cash flow": "actual_cash_flow",
    "actual cash flow": "actual_cash_flow",
    "cash received": "actual_cash_flow",
    "cash": "actual_cash_flow",
    "stated purpose": "stated_purpose",
    "purpose": "stated_purpose",
    "loan purpose": "stated_purpose",
    "actual usage": "actual_usage",
    "usage": "actual_usage",
    "actual use": "actual_usage",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[_\-]+")
_AMOUNT_NOISE = re.compile(r"[₹$,\s]")

_TRUTHY = {"yes", "true", "1", "y"}

_DATE_FORMATS = ("%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d")


def normalize_header(header: Any) -> str:
    """
    "Bank_Account_number", "bankAccountNo", " Party-Name " ->
    "bank account number", "bank account no", "party name"
    """
    text = _CAMEL_BOUNDARY.sub(" ", str(header or "").strip())
    text = _SEPARATORS.sub(" ", text).lower()
    return " ".join(text.split())


def map_row(row: Any, columns: Mapping[str, str]) -> Dict[str, Any]:
    """Rename a row's keys through a column map. Unknown headers are dropped; first match wins."""
    if not isinstance(row, Mapping):
        raise RecordNormalizationError(f"Expected a mapping row, got {type(row).__name__}")

    mapped: Dict[str, Any] = {}
    for raw_header, value in row.items():
        field = columns.get(normalize_header(raw_header))
        if field and field not in mapped:
            mapped[field] = value
    return mapped


# -------------------------
# Value coercion
# -------------------------

def parse_amount(value: Any) -> float:
    """
    Supports:
    - 1234.56
    - "1,234.56"
    - "₹ 5,00,000"
    - " -59.99 "

    Anything else, including "NaN" and "inf", becomes 0.0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        cleaned = _AMOUNT_NOISE.sub("", str(value or ""))
        try:
            result = float(cleaned)
        except ValueError:
            return 0.0
    return result if math.isfinite(result) else 0.0


def parse_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    return str(value).strip().lower() in _TRUTHY


def parse_type(value: Any) -> TransactionType:
    s = re.sub(r"[_\-\s]+", "", str(value or "")).lower()
    if "sale" in s or s in {"revenue", "income"}:
        return "sale"
    if "purchase" in s or s in {"buy", "cogs"}:
        return "purchase"
    if "expense" in s or s == "operational":
        return "expense"
    if "transfer" in s:
        return "transfer"
    if "loanin" in s or "borrow" in s or s == "loan":
        return "loan_in"
    if "loanout" in s or "lend" in s or "advance" in s:
        return "loan_out"
    return "sale"


def parse_date(value: Any, today: Optional[date] = None) -> Optional[date]:
    """
    Blank means "entered today". Unreadable dates come back as None so the
    engine treats date rules as not triggered.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value or "").strip()
    if not raw:
        return today or date.today()

    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue

    logger.warning("[norma] unreadable date %r; date-based rules will not fire", raw)
    return None


def parse_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_identifier(value: Any) -> Optional[str]:
    """Spreadsheet ids often arrive as 101.0; keep them as "101"."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return parse_text(value)


# -------------------------
# Transactions
# -------------------------

def row_to_transaction(row: Any, index: int, today: Optional[date] = None) -> Transaction:
    mapped = map_row(row, TRANSACTION_COLUMNS)

    amount = abs(parse_amount(mapped.get("amount")))
    if "actual_cash_flow" in mapped:
        cash = parse_amount(mapped["actual_cash_flow"])
    else:
        cash = amount

    return Transaction(
        id=parse_identifier(mapped.get("id")) or f"T-UPLOAD-{index + 1}",
        date=parse_date(mapped.get("date"), today),
        amount=amount,
        type=parse_type(mapped.get("type")) if "type" in mapped else "sale",
        counterparty_name=parse_text(mapped.get("counterparty_name")) or "Unknown",
        category=parse_text(mapped.get("category")) or "General",
        is_related_party=parse_boolean(mapped["is_related_party"]) if "is_related_party" in mapped else False,
        is_disclosed=parse_boolean(mapped["is_disclosed"]) if "is_disclosed" in mapped else True,
        actual_cash_flow=cash,
        stated_purpose=parse_text(mapped.get("stated_purpose")),
        actual_usage=parse_text(mapped.get("actual_usage")),
    )
