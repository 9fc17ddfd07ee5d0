"""
Tests for CSV import/export
"""
from decimal import Decimal

from questledger.domain.transaction import Transaction, TransactionType
from questledger.utils.csv_io import CSV_COLUMNS, parse_csv, to_csv


def _txn(**overrides):
    data = dict(id="t1", date="2024-01-15T10:00:00", amount=Decimal("125.50"),
                type=TransactionType.EXPENSE, account_id="cash", envelope_id="food",
                merchant="Jollibee, SM North", note=None, tags=("lunch", "work"))
    data.update(overrides)
    return Transaction(**data)


class TestToCsv:
    def test_header_and_quoted_row(self):
        lines = to_csv([_txn()]).splitlines()
        assert lines[0] == ",".join(f'"{c}"' for c in CSV_COLUMNS)
        assert lines[1] == ('"2024-01-15T10:00:00","125.50","expense","food","cash",'
                            '"Jollibee, SM North","","lunch;work"')

    def test_empty_list_is_header_only(self):
        assert len(to_csv([]).splitlines()) == 1


class TestParseCsv:
    def test_parses_rows(self, now):
        text = (
            "date,amount,type,envelope,account,merchant,note,tags\n"
            "2024-01-10,250,expense,food,cash,Grocer,,weekly;food\n"
            "2024-01-11,1000,income,,gcash,,Allowance,\n"
        )
        rows = parse_csv(text, now)
        stamp = int(now.timestamp() * 1000)
        assert [r.id for r in rows] == [f"csv-{stamp}-1", f"csv-{stamp}-2"]
        first, second = rows
        assert first.amount == Decimal("250")
        assert first.tags == ("weekly", "food")
        assert second.type == TransactionType.INCOME
        assert second.envelope_id is None
        assert second.note == "Allowance"

    def test_invalid_rows_skipped(self, now, caplog):
        text = (
            "date,amount,type,envelope,account,merchant,note,tags\n"
            "2024-01-10,,expense,food,cash,,,\n"
            "2024-01-10,abc,expense,food,cash,,,\n"
            "2024-01-10,10,gift,food,cash,,,\n"
            "2024-01-10,10,expense,food,,,,\n"
            "2024-01-10,10,expense,food,cash,,,\n"
        )
        rows = parse_csv(text, now)
        assert len(rows) == 1
        assert rows[0].id.endswith("-5")
        assert caplog.text.count("Skipping CSV row") == 4

    def test_export_then_import(self, now):
        original = _txn(note="Team lunch")
        parsed, = parse_csv(to_csv([original]), now)
        assert parsed.amount == original.amount
        assert parsed.merchant == original.merchant
        assert parsed.tags == original.tags
        assert parsed.note == "Team lunch"

    def test_header_only(self, now):
        assert parse_csv("date,amount,type,envelope,account,merchant,note,tags\n", now) == []

    def test_non_iso_date_skipped(self, now, caplog):
        text = (
            "date,amount,type,account\n"
            '"01/15/2024","20","expense","cash"\n'
            '"2024-01-15T09:30:00","30","expense","cash"\n'
        )
        rows = parse_csv(text, now)
        assert [r.date for r in rows] == ["2024-01-15T09:30:00"]
        assert "bad date '01/15/2024'" in caplog.text

    def test_thousands_separator_in_amount(self, now):
        text = 'date,amount,type,account\n"2024-01-15","1,500.25","income","cash"\n'
        row, = parse_csv(text, now)
        assert row.amount == Decimal("1500.25")
