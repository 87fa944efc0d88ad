import datetime
import decimal
import typing

from monzo_beancount import constants
from monzo_beancount.data_types import CategorySplit, SkippedRow, Transaction
from monzo_beancount.errors import CategorySplitError, ParseError

Cell = str | int | float | decimal.Decimal | None
Row = typing.Sequence[Cell]


def currency_exponent(currency: str | None) -> int:
    if currency is None:
        return constants.DEFAULT_MINOR_EXPONENT
    return constants.CURRENCY_EXPONENTS.get(
        currency.upper(), constants.DEFAULT_MINOR_EXPONENT
    )


def parse_string(value: Cell) -> str | None:
    """Read a free-text cell, dropping characters Beancount strings choke on"""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text.replace("/", "_").replace("&", "")


def parse_minor_units(
    value: Cell, exponent: int = constants.DEFAULT_MINOR_EXPONENT, field: str = "amount"
) -> int:
    """Convert a currency-like value into integer minor units, "-500.00" -> -50000"""
    if value is None:
        raise ParseError(field, value, "missing value")
    if isinstance(value, bool):
        raise ParseError(field, value, "not a number")
    text = str(value).strip().strip('"').replace(",", "").replace(" ", "")
    if not text:
        raise ParseError(field, value, "missing value")
    try:
        number = decimal.Decimal(text)
    except decimal.InvalidOperation:
        raise ParseError(field, value, "not a number")
    if not number.is_finite():
        raise ParseError(field, value, "not a number")
    try:
        with decimal.localcontext() as ctx:
            ctx.traps[decimal.Inexact] = True
            ctx.traps[decimal.Underflow] = True
            scaled = number.scaleb(exponent)
    except decimal.DecimalException as exc:
        raise ParseError(field, value, f"out of range ({exc.__class__.__name__})")
    if scaled and scaled.adjusted() >= constants.MAX_MINOR_UNIT_DIGITS:
        raise ParseError(
            field,
            value,
            f"more than {constants.MAX_MINOR_UNIT_DIGITS} digits in minor units",
        )
    if scaled != scaled.to_integral_value():
        raise ParseError(field, value, f"more than {exponent} decimal places")
    return int(scaled)


def minor_units_to_decimal(
    minor: int, exponent: int = constants.DEFAULT_MINOR_EXPONENT
) -> decimal.Decimal:
    return decimal.Decimal(minor).scaleb(-exponent).quantize(
        decimal.Decimal(1).scaleb(-exponent)
    )


def format_minor_units(
    minor: int, exponent: int = constants.DEFAULT_MINOR_EXPONENT
) -> str:
    return str(minor_units_to_decimal(minor, exponent))


def parse_date(value: Cell, fmt: str = constants.SHEET_DATE_FORMAT) -> datetime.date:
    if value is None:
        raise ParseError("date", value, "missing value")
    text = str(value).strip().strip('"')
    try:
        return datetime.datetime.strptime(text, fmt).date()
    except ValueError as exc:
        raise ParseError("date", value, str(exc))


def parse_category_split(value: Cell) -> tuple[CategorySplit, ...] | None:
    """
    Parse a category split annotation like "Groceries:12.50, Eating out:-3.20".
    One malformed pair fails the whole field.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    splits: list[CategorySplit] = []
    for item in value.split(","):
        parts = item.split(":")
        if len(parts) != 2:
            raise CategorySplitError(value, f"invalid format {item!r}")
        category = parts[0].strip()
        try:
            amount = parse_minor_units(parts[1], field="category_split")
        except ParseError:
            raise CategorySplitError(
                value, f"invalid value for category {category!r}"
            )
        splits.append(CategorySplit(category=category, amount=amount))
    return tuple(splits)


def _cell(row: Row, index: int | None) -> Cell:
    if index is None or index >= len(row):
        return None
    return row[index]


def normalize_row(
    row: Row,
    layout: typing.Mapping[str, int] = constants.SHEET_LAYOUT,
) -> Transaction:
    def cell(field: str) -> Cell:
        return _cell(row, layout.get(field))

    txn_id = parse_string(cell("id"))
    if txn_id is None:
        raise ParseError("id", cell("id"), "missing value")

    currency = parse_string(cell("currency"))
    if currency is None:
        raise ParseError("currency", cell("currency"), "missing value")
    local_currency = parse_string(cell("local_currency")) or currency
    amount = parse_minor_units(cell("amount"), currency_exponent(currency))
    local_amount_cell = cell("local_amount")
    if local_amount_cell is None or str(local_amount_cell).strip() == "":
        local_amount = amount
    else:
        local_amount = parse_minor_units(
            local_amount_cell,
            currency_exponent(local_currency),
            field="local_amount",
        )

    return Transaction(
        id=txn_id,
        date=parse_date(cell("date")),
        payment_type=parse_string(cell("payment_type")) or "",
        name=parse_string(cell("name")) or "",
        category=parse_string(cell("category")) or "",
        amount=amount,
        currency=currency,
        local_amount=local_amount,
        local_currency=local_currency,
        notes=parse_string(cell("notes")),
        description=parse_string(cell("description")),
        category_split=parse_category_split(cell("category_split")),
    )


def normalize_rows(
    rows: typing.Iterable[Row],
    source: str,
    layout: typing.Mapping[str, int] = constants.SHEET_LAYOUT,
    skip_header: bool = True,
) -> typing.Generator[Transaction | SkippedRow, None, None]:
    for row_number, row in enumerate(rows, start=1):
        if skip_header and row_number == 1:
            continue
        if not any(cell not in (None, "") for cell in row):
            continue
        try:
            yield normalize_row(row, layout)
        except ParseError as exc:
            yield SkippedRow(source=source, row_number=row_number, error=exc)
