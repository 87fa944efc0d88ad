import pathlib
import typing

from monzo_beancount import constants
from monzo_beancount.classifier import ClassifierAccounts, classify_transaction
from monzo_beancount.data_types import (
    Account,
    AccountLedger,
    AccountType,
    CommentDirective,
    Directive,
    GoogleSheetAccount,
    IncludeDirective,
    OpenDirective,
    OptionDirective,
    SkippedRow,
    Transaction,
    TransactionDirective,
    UserSettings,
)
from monzo_beancount.errors import LedgerError
from monzo_beancount.formatter import account_to_text
from monzo_beancount.normalizer import currency_exponent, format_minor_units
from monzo_beancount.resolver import make_postings
from monzo_beancount.templates import render_narration
from monzo_beancount.utils import include_path


class DirectiveBuilder:
    """Collects directives in the order they are appended"""

    def __init__(self):
        self._directives: list[Directive] = []

    def __len__(self) -> int:
        return len(self._directives)

    def append(self, directive: Directive) -> "DirectiveBuilder":
        self._directives.append(directive)
        return self

    def extend(self, directives: typing.Iterable[Directive]) -> "DirectiveBuilder":
        self._directives.extend(directives)
        return self

    def comment(self, text: str) -> "DirectiveBuilder":
        return self.append(CommentDirective(text=text))

    def build(self) -> tuple[Directive, ...]:
        return tuple(self._directives)


def option_directives(settings: UserSettings) -> list[Directive]:
    return [
        OptionDirective(key="title", value=settings.title),
        OptionDirective(key="operating_currency", value=settings.operating_currency),
    ]


def include_directives(
    include_dir: pathlib.Path,
    manual_accounts: typing.Iterable[str] | None,
    discovered: typing.Iterable[pathlib.Path] = (),
) -> list[Directive]:
    paths: list[str] = []
    for manual_account in manual_accounts or ():
        paths.append(
            include_path(include_dir / f"{manual_account}{constants.BEANCOUNT_SUFFIX}")
        )
    for fragment in sorted(discovered):
        paths.append(include_path(fragment))

    seen: set[str] = set()
    directives: list[Directive] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        directives.append(IncludeDirective(path=path))
    return directives


def expense_categories(transactions: typing.Iterable[Transaction]) -> list[str]:
    return sorted(
        {
            txn.category or constants.UNCATEGORIZED
            for txn in transactions
            if txn.category not in constants.NON_EXPENSE_CATEGORIES
        }
    )


def open_directives(
    settings: UserSettings,
    expense_accounts: typing.Iterable[Account] = (),
) -> list[Directive]:
    start_date = settings.start_date
    builder = DirectiveBuilder()
    opened: set[str] = set()

    def open_all(accounts: typing.Iterable[Account] | None):
        for account in accounts or ():
            # the same account may be both discovered and configured
            name = account_to_text(account)
            if name in opened:
                continue
            opened.add(name)
            builder.append(OpenDirective(date=start_date, account=account))

    builder.comment("equity accounts")
    builder.append(
        OpenDirective(
            date=start_date,
            account=Account(
                account_type=AccountType.Equity,
                country=settings.operating_currency,
                institution="",
                name=constants.OPENING_BALANCES_ACCOUNT,
            ),
        )
    )
    builder.comment("asset accounts")
    open_all(settings.assets)
    builder.comment("liability accounts")
    open_all(settings.liabilities)
    builder.comment("income accounts")
    open_all(settings.income)
    builder.comment("expense accounts")
    open_all(expense_accounts)
    open_all(settings.expenses)
    return list(builder.build())


def sheet_expense_accounts(
    sheet_account: GoogleSheetAccount, transactions: typing.Iterable[Transaction]
) -> list[Account]:
    return [
        Account(
            account_type=AccountType.Expenses,
            country=sheet_account.country,
            institution=sheet_account.institution,
            name=sheet_account.name,
            sub_account=category,
        )
        for category in expense_categories(transactions)
    ]


def transaction_comment(txn: Transaction) -> str | None:
    if not txn.local_currency or txn.local_currency == txn.currency:
        return None
    amount = format_minor_units(
        txn.local_amount, currency_exponent(txn.local_currency)
    )
    return f"{amount} {txn.local_currency}"


def transaction_directives(
    sheet_account: GoogleSheetAccount,
    transactions: typing.Iterable[Transaction],
    accounts: ClassifierAccounts,
    narration: str = constants.DEFAULT_NARRATION_TEMPLATE,
) -> tuple[list[Directive], list[SkippedRow]]:
    source = sheet_account.to_account()
    directives: list[Directive] = []
    skipped: list[SkippedRow] = []
    # pot transfers come from the pot CSV exports instead
    accepted = [
        txn
        for txn in transactions
        if txn.payment_type != constants.POT_TRANSFER_PAYMENT_TYPE
    ]
    for txn in sorted(accepted, key=lambda txn: txn.date):
        try:
            postings = make_postings(source, txn, classify_transaction(accounts, txn))
            notes = render_narration(narration, txn)
        except LedgerError as exc:
            skipped.append(
                SkippedRow(source=sheet_account.name, row_number=None, error=exc)
            )
            continue
        directives.append(
            TransactionDirective(
                date=txn.date,
                payee=txn.name,
                notes=notes,
                comment=transaction_comment(txn),
                transaction_id=txn.id,
                postings=postings,
            )
        )
    return directives, skipped


def build_account_ledger(
    sheet_account: GoogleSheetAccount,
    transactions: typing.Sequence[Transaction],
    accounts: ClassifierAccounts,
    settings: UserSettings,
    skipped: typing.Iterable[SkippedRow] = (),
) -> AccountLedger:
    directives, resolve_skipped = transaction_directives(
        sheet_account, transactions, accounts, narration=settings.narration
    )
    return AccountLedger(
        account=sheet_account,
        directives=tuple(directives),
        skipped=(*skipped, *resolve_skipped),
        expense_accounts=tuple(sheet_expense_accounts(sheet_account, transactions)),
    )


def build_ledger(
    settings: UserSettings,
    account_ledgers: typing.Iterable[AccountLedger],
    include_dir: pathlib.Path,
    discovered: typing.Iterable[pathlib.Path] = (),
) -> tuple[Directive, ...]:
    account_ledgers = list(account_ledgers)
    builder = DirectiveBuilder()
    builder.extend(option_directives(settings))
    builder.extend(
        include_directives(include_dir, settings.manual_accounts, discovered)
    )
    builder.extend(
        open_directives(
            settings,
            expense_accounts=[
                account
                for ledger in account_ledgers
                for account in ledger.expense_accounts
            ],
        )
    )
    builder.comment("transactions")
    for ledger in account_ledgers:
        builder.extend(ledger.directives)
    return builder.build()
