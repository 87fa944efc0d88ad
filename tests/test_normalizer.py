import datetime
import decimal

import pytest

from monzo_beancount.data_types import CategorySplit
from monzo_beancount.data_types import SkippedRow
from monzo_beancount.data_types import Transaction
from monzo_beancount.errors import CategorySplitError
from monzo_beancount.errors import ParseError
from monzo_beancount.normalizer import currency_exponent
from monzo_beancount.normalizer import format_minor_units
from monzo_beancount.normalizer import minor_units_to_decimal
from monzo_beancount.normalizer import normalize_row
from monzo_beancount.normalizer import normalize_rows
from monzo_beancount.normalizer import parse_category_split
from monzo_beancount.normalizer import parse_date
from monzo_beancount.normalizer import parse_minor_units
from monzo_beancount.normalizer import parse_string

HEADER = [
    "Transaction ID",
    "Date",
    "Time",
    "Type",
    "Name",
    "Emoji",
    "Category",
    "Amount",
    "Currency",
    "Local amount",
    "Local currency",
    "Notes and #tags",
    "Address",
    "Receipt",
    "Description",
    "Category split",
]


def make_row(**kwargs) -> list[str]:
    values = {
        "Transaction ID": "tx_0001",
        "Date": "13/06/2024",
        "Time": "10:00:00",
        "Type": "Card payment",
        "Name": "Tesco",
        "Category": "Groceries",
        "Amount": "-12.50",
        "Currency": "GBP",
        "Local amount": "-12.50",
        "Local currency": "GBP",
        "Notes and #tags": "weekly shop",
        "Description": "TESCO STORES 1234",
    }
    values.update(kwargs)
    return [values.get(column, "") for column in HEADER]


@pytest.mark.parametrize(
    "currency, expected",
    [
        ("GBP", 2),
        ("gbp", 2),
        ("JPY", 0),
        ("KWD", 3),
        (None, 2),
        ("XYZ", 2),
    ],
)
def test_currency_exponent(currency: str | None, expected: int):
    assert currency_exponent(currency) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Tesco", "Tesco"),
        ("  Tesco  ", "Tesco"),
        ("Food/Drink", "Food_Drink"),
        ("Marks & Spencer", "Marks  Spencer"),
        ("", None),
        ("   ", None),
        (None, None),
    ],
)
def test_parse_string(value: str | None, expected: str | None):
    assert parse_string(value) == expected


@pytest.mark.parametrize(
    "value, exponent, expected",
    [
        ("-500.00", 2, -50000),
        ("12.5", 2, 1250),
        ("0.01", 2, 1),
        ("1,234.56", 2, 123456),
        ('"-3.20"', 2, -320),
        (" 7 ", 2, 700),
        ("1000", 0, 1000),
        ("1.234", 3, 1234),
        (12, 2, 1200),
        (decimal.Decimal("-0.80"), 2, -80),
        ("9999999999999999.99", 2, 999999999999999999),
    ],
)
def test_parse_minor_units(value, exponent: int, expected: int):
    assert parse_minor_units(value, exponent) == expected


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "abc",
        "1.234",
        "NaN",
        "Infinity",
        True,
        "1e999999999",
        "1e-999999999",
        "-1e30",
        "123456789012345678.00",
    ],
)
def test_parse_minor_units_error(value):
    with pytest.raises(ParseError) as exc_info:
        parse_minor_units(value, field="local_amount")
    assert exc_info.value.field == "local_amount"
    assert exc_info.value.value == value


@pytest.mark.parametrize(
    "minor, exponent, expected",
    [
        (-50000, 2, "-500.00"),
        (5, 2, "0.05"),
        (0, 2, "0.00"),
        (1000, 0, "1000"),
        (-5, 3, "-0.005"),
    ],
)
def test_format_minor_units(minor: int, exponent: int, expected: str):
    assert format_minor_units(minor, exponent) == expected


def test_minor_units_round_trip():
    minor = parse_minor_units("-500.00")
    assert minor == -50000
    assert minor_units_to_decimal(minor) == decimal.Decimal("-500.00")
    assert format_minor_units(minor) == "-500.00"


@pytest.mark.parametrize(
    "value, fmt, expected",
    [
        ("13/06/2024", "%d/%m/%Y", datetime.date(2024, 6, 13)),
        (" 01/02/2024 ", "%d/%m/%Y", datetime.date(2024, 2, 1)),
        ("2024-04-14", "%Y-%m-%d", datetime.date(2024, 4, 14)),
    ],
)
def test_parse_date(value: str, fmt: str, expected: datetime.date):
    assert parse_date(value, fmt) == expected


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "2024-06-13",
        "31/02/2024",
    ],
)
def test_parse_date_error(value: str | None):
    with pytest.raises(ParseError) as exc_info:
        parse_date(value)
    assert exc_info.value.field == "date"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("", None),
        ("  ", None),
        (12, None),
        (
            "Groceries:12.50",
            (CategorySplit(category="Groceries", amount=1250),),
        ),
        (
            "Groceries:12.50, Eating out:-3.20",
            (
                CategorySplit(category="Groceries", amount=1250),
                CategorySplit(category="Eating out", amount=-320),
            ),
        ),
    ],
)
def test_parse_category_split(value, expected):
    assert parse_category_split(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        "Groceries",
        "Groceries:12.50:extra",
        "Groceries:lots",
        "Groceries:12.50, Eating out",
    ],
)
def test_parse_category_split_error(value: str):
    with pytest.raises(CategorySplitError) as exc_info:
        parse_category_split(value)
    assert exc_info.value.field == "category_split"
    assert exc_info.value.value == value


@pytest.mark.parametrize(
    "row, expected",
    [
        (
            make_row(),
            Transaction(
                id="tx_0001",
                date=datetime.date(2024, 6, 13),
                payment_type="Card payment",
                name="Tesco",
                category="Groceries",
                amount=-1250,
                currency="GBP",
                local_amount=-1250,
                local_currency="GBP",
                notes="weekly shop",
                description="TESCO STORES 1234",
            ),
        ),
        (
            make_row(
                **{
                    "Name": "Delta Air Lines",
                    "Category": "Travel",
                    "Amount": "-80.00",
                    "Local amount": "-100.00",
                    "Local currency": "USD",
                    "Notes and #tags": "",
                    "Category split": "Travel:-60.00, Eating out:-20.00",
                }
            ),
            Transaction(
                id="tx_0001",
                date=datetime.date(2024, 6, 13),
                payment_type="Card payment",
                name="Delta Air Lines",
                category="Travel",
                amount=-8000,
                currency="GBP",
                local_amount=-10000,
                local_currency="USD",
                notes=None,
                description="TESCO STORES 1234",
                category_split=(
                    CategorySplit(category="Travel", amount=-6000),
                    CategorySplit(category="Eating out", amount=-2000),
                ),
            ),
        ),
        (
            make_row(**{"Local amount": "", "Local currency": ""}),
            Transaction(
                id="tx_0001",
                date=datetime.date(2024, 6, 13),
                payment_type="Card payment",
                name="Tesco",
                category="Groceries",
                amount=-1250,
                currency="GBP",
                local_amount=-1250,
                local_currency="GBP",
                notes="weekly shop",
                description="TESCO STORES 1234",
            ),
        ),
        (
            # trailing empty columns are dropped by some exports
            make_row()[:9],
            Transaction(
                id="tx_0001",
                date=datetime.date(2024, 6, 13),
                payment_type="Card payment",
                name="Tesco",
                category="Groceries",
                amount=-1250,
                currency="GBP",
                local_amount=-1250,
                local_currency="GBP",
            ),
        ),
    ],
)
def test_normalize_row(row: list[str], expected: Transaction):
    assert normalize_row(row) == expected


@pytest.mark.parametrize(
    "row, field",
    [
        (make_row(**{"Transaction ID": ""}), "id"),
        (make_row(Date="yesterday"), "date"),
        (make_row(Amount="twelve"), "amount"),
        (make_row(Amount=""), "amount"),
        (make_row(Amount="1e999999999"), "amount"),
        (make_row(Amount="-1e30"), "amount"),
        (make_row(Currency=""), "currency"),
        (make_row(**{"Local amount": "x"}), "local_amount"),
        (make_row(**{"Category split": "Groceries"}), "category_split"),
    ],
)
def test_normalize_row_error(row: list[str], field: str):
    with pytest.raises(ParseError) as exc_info:
        normalize_row(row)
    assert exc_info.value.field == field


def test_normalize_rows():
    rows = [
        HEADER,
        make_row(),
        [""] * len(HEADER),
        make_row(**{"Transaction ID": "tx_0002", "Date": "not a date"}),
        make_row(**{"Transaction ID": "tx_0003", "Amount": "1.00"}),
    ]
    results = list(normalize_rows(rows, source="personal"))
    assert len(results) == 3

    first, skipped, last = results
    assert isinstance(first, Transaction)
    assert first.id == "tx_0001"
    assert isinstance(skipped, SkippedRow)
    assert skipped.source == "personal"
    assert skipped.row_number == 4
    assert isinstance(skipped.error, ParseError)
    assert skipped.error.field == "date"
    assert isinstance(last, Transaction)
    assert last.id == "tx_0003"
    assert last.amount == 100


def test_normalize_rows_without_header():
    results = list(normalize_rows([make_row()], source="personal", skip_header=False))
    assert [txn.id for txn in results] == ["tx_0001"]


def test_normalize_rows_out_of_range_amounts():
    rows = [
        HEADER,
        make_row(**{"Transaction ID": "tx_0001", "Amount": "1e999999999"}),
        make_row(**{"Transaction ID": "tx_0002", "Local amount": "-1e30"}),
        make_row(**{"Transaction ID": "tx_0003"}),
    ]
    results = list(normalize_rows(rows, source="personal"))
    assert [type(item) for item in results] == [SkippedRow, SkippedRow, Transaction]
    assert [item.error.field for item in results[:2]] == ["amount", "local_amount"]
    assert [item.row_number for item in results[:2]] == [2, 3]
