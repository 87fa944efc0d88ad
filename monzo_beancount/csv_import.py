"""
Turn the CSV export of a Monzo pot into a ledger fragment for the include
directory. Pot spending never shows up in the sheet export, so each pot gets
its own file with its transactions and a close directive for the pot.
"""
import pathlib
import typing

from monzo_beancount import constants
from monzo_beancount.assembler import DirectiveBuilder
from monzo_beancount.data_types import (
    Account,
    AccountType,
    CloseDirective,
    Directive,
    Posting,
    Postings,
    PotImportConfig,
    PotRecord,
    SkippedRow,
    TransactionDirective,
)
from monzo_beancount.errors import UnbalancedPostingsError
from monzo_beancount.extractor import PotCsvExtractor
from monzo_beancount.formatter import pascal_case, title_case
from monzo_beancount.normalizer import currency_exponent, minor_units_to_decimal


def pot_name_from_file(csv_file: pathlib.Path) -> str:
    """essential-variable-pot.csv -> EssentialVariablePot"""
    return pascal_case(csv_file.stem)


def is_transfer(record: PotRecord) -> bool:
    return record.description.startswith(constants.TRANSFER_DESCRIPTION_PREFIXES)


def is_income(record: PotRecord) -> bool:
    return record.category == constants.INCOME_CATEGORY


def pot_account(
    config: PotImportConfig,
    name: str,
    account_type: AccountType = AccountType.Assets,
    sub_account: str | None = None,
) -> Account:
    return Account(
        account_type=account_type,
        country=config.country,
        institution=config.institution,
        name=name,
        sub_account=sub_account,
    )


def make_pot_postings(
    record: PotRecord, pot_name: str, config: PotImportConfig
) -> Postings:
    exponent = currency_exponent(config.currency)
    inflow = is_income(record) or is_transfer(record)

    if inflow:
        to_account = pot_account(config, pot_name)
        to_amount = record.amount
    else:
        to_account = pot_account(
            config,
            config.parent_account,
            account_type=AccountType.Expenses,
            sub_account=record.category or constants.UNCATEGORIZED,
        )
        to_amount = -record.amount

    if is_income(record):
        from_account = pot_account(config, pot_name, account_type=AccountType.Income)
    elif is_transfer(record):
        from_account = pot_account(config, config.parent_account)
    else:
        from_account = pot_account(config, pot_name)

    postings = Postings(
        from_=Posting(
            account=from_account,
            amount=minor_units_to_decimal(-to_amount, exponent),
            currency=config.currency,
            description=record.description,
        ),
        to=Posting(
            account=to_account,
            amount=minor_units_to_decimal(to_amount, exponent),
            currency=config.currency,
            description=record.description,
        ),
    )
    total = postings.from_.amount + postings.to.amount
    if total != 0:
        raise UnbalancedPostingsError(transaction_id=record.description, total=total)
    return postings


def record_comment(record: PotRecord, config: PotImportConfig) -> str | None:
    if record.local_amount is None or record.local_currency is None:
        return None
    if record.local_currency == config.currency:
        return None
    amount = minor_units_to_decimal(
        record.local_amount, currency_exponent(record.local_currency)
    )
    return f"{amount} {record.local_currency}"


def pot_directives(
    records: typing.Iterable[PotRecord], pot_name: str, config: PotImportConfig
) -> list[Directive]:
    records = sorted(records, key=lambda record: record.date)
    builder = DirectiveBuilder()
    builder.comment(pot_name)
    builder.comment("Transactions")
    for record in records:
        builder.append(
            TransactionDirective(
                date=record.date,
                notes=record.description,
                comment=record_comment(record, config),
                postings=make_pot_postings(record, pot_name, config),
            )
        )
    if records:
        builder.append(
            CloseDirective(
                date=records[-1].date,
                account=pot_account(config, pot_name),
                comment=f"Close {title_case(pot_name)}",
            )
        )
    return list(builder.build())


def process_csv_file(
    csv_file: pathlib.Path, config: PotImportConfig
) -> tuple[list[Directive], list[SkippedRow]]:
    records: list[PotRecord] = []
    skipped: list[SkippedRow] = []
    with csv_file.open("rt", newline="", encoding="utf-8") as fo:
        extractor = PotCsvExtractor(fo, currency=config.currency)
        for item in extractor.process():
            if isinstance(item, SkippedRow):
                skipped.append(item)
            else:
                records.append(item)
    return pot_directives(records, pot_name_from_file(csv_file), config), skipped
