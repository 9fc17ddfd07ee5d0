"""
CSV import/export of transactions.

Columns: date,amount,type,envelope,account,merchant,note,tags
Tags are joined with ";" inside their cell.
"""
import csv
import io
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from questledger.domain.transaction import Transaction, TransactionType
from questledger.utils.dates import parse_iso
from questledger.utils.money import normalize_decimal_input

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("date", "amount", "type", "envelope", "account", "merchant", "note", "tags")
REQUIRED_COLUMNS = ("date", "amount", "type", "account")


def to_csv(transactions: Iterable[Transaction]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for t in transactions:
        writer.writerow([
            t.date,
            str(t.amount),
            t.type.value,
            t.envelope_id or "",
            t.account_id,
            t.merchant or "",
            t.note or "",
            ";".join(t.tags),
        ])
    return buf.getvalue()


def parse_csv(text: str, now: Optional[datetime] = None) -> list[Transaction]:
    """
    Parse exported (or hand-made) CSV into transactions.

    Rows missing date/amount/type/account, or with a date, amount or type
    that does not parse, are skipped with a warning. Ids are
    ``csv-<timestamp ms>-<row number>``.
    """
    stamp = int((now or datetime.now()).timestamp() * 1000)
    reader = csv.DictReader(io.StringIO(text.strip()))
    transactions = []

    for row_no, raw in enumerate(reader, start=1):
        row = {(k or "").strip(): (v or "").strip() for k, v in raw.items()}
        missing = [c for c in REQUIRED_COLUMNS if not row.get(c)]
        if missing:
            logger.warning("Skipping CSV row %d: missing %s", row_no, ", ".join(missing))
            continue
        try:
            amount = Decimal(normalize_decimal_input(row["amount"]))
            tx_type = TransactionType(row["type"].lower())
            parse_iso(row["date"])
        except (InvalidOperation, ValueError):
            logger.warning("Skipping CSV row %d: bad date %r, amount %r or type %r",
                           row_no, row["date"], row["amount"], row["type"])
            continue

        transactions.append(Transaction(
            id=f"csv-{stamp}-{row_no}",
            date=row["date"],
            amount=amount,
            type=tx_type,
            account_id=row["account"],
            envelope_id=row.get("envelope") or None,
            merchant=row.get("merchant") or None,
            note=row.get("note") or None,
            tags=tuple(tag for tag in row.get("tags", "").split(";") if tag),
        ))

    return transactions
