import dataclasses
import datetime
import decimal
import enum
import pathlib

from pydantic import BaseModel, ConfigDict

from monzo_beancount import constants


@enum.unique
class AccountType(str, enum.Enum):
    Assets = "Assets"
    Liabilities = "Liabilities"
    Income = "Income"
    Expenses = "Expenses"
    Equity = "Equity"


@dataclasses.dataclass(frozen=True)
class Account:
    account_type: AccountType
    # jurisdiction label, Monzo configs use the currency code here (GBP)
    country: str
    institution: str
    name: str
    sub_account: str | None = None
    # id of the transaction this account was resolved for
    transaction_id: str | None = None


@dataclasses.dataclass(frozen=True)
class CategorySplit:
    category: str
    # amount in minor units
    amount: int


@dataclasses.dataclass(frozen=True)
class Transaction:
    # the unique id of the transaction
    id: str
    # date of the transaction
    date: datetime.date
    # how the money moved, like "Faster payment" or "Pot transfer"
    payment_type: str
    # counterparty name
    name: str
    # category assigned by the bank, like Groceries, Income, Transfers
    category: str
    # amount in minor units of `currency`
    amount: int
    # ISO 4217 currency symbol of the account
    currency: str
    # amount in minor units of `local_currency`
    local_amount: int
    # ISO 4217 currency symbol the transaction happened in
    local_currency: str
    notes: str | None = None
    description: str | None = None
    category_split: tuple[CategorySplit, ...] | None = None


@dataclasses.dataclass(frozen=True)
class PotRecord:
    """A row of a pot CSV export, amounts already in minor units."""

    date: datetime.date
    description: str
    amount: int
    local_currency: str | None = None
    local_amount: int | None = None
    category: str | None = None


@dataclasses.dataclass(frozen=True)
class Posting:
    account: Account
    amount: decimal.Decimal
    currency: str
    description: str | None = None


@dataclasses.dataclass(frozen=True)
class Postings:
    from_: Posting
    to: Posting


@dataclasses.dataclass(frozen=True)
class OptionDirective:
    key: str
    value: str


@dataclasses.dataclass(frozen=True)
class IncludeDirective:
    path: str


@dataclasses.dataclass(frozen=True)
class CommentDirective:
    text: str


@dataclasses.dataclass(frozen=True)
class OpenDirective:
    date: datetime.date
    account: Account
    comment: str | None = None


@dataclasses.dataclass(frozen=True)
class CloseDirective:
    date: datetime.date
    account: Account
    comment: str | None = None


@dataclasses.dataclass(frozen=True)
class TransactionDirective:
    date: datetime.date
    notes: str
    postings: Postings
    comment: str | None = None
    payee: str | None = None
    transaction_id: str | None = None
    flag: str = "*"


@dataclasses.dataclass(frozen=True)
class BalanceDirective:
    date: datetime.date
    account: Account
    amount: decimal.Decimal = decimal.Decimal("0.00")
    currency: str | None = None


Directive = (
    OptionDirective
    | IncludeDirective
    | CommentDirective
    | OpenDirective
    | CloseDirective
    | TransactionDirective
    | BalanceDirective
)


@dataclasses.dataclass(frozen=True)
class IncomeGeneral:
    pass


@dataclasses.dataclass(frozen=True)
class IncomeAccount:
    account: Account


@dataclasses.dataclass(frozen=True)
class Savings:
    pass


@dataclasses.dataclass(frozen=True)
class TransferOpeningBalance:
    pass


@dataclasses.dataclass(frozen=True)
class TransferPot:
    pass


@dataclasses.dataclass(frozen=True)
class TransferAsset:
    account: Account


Classification = (
    IncomeGeneral
    | IncomeAccount
    | Savings
    | TransferOpeningBalance
    | TransferPot
    | TransferAsset
)


class SettingsBaseModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class GoogleSheetAccount(SettingsBaseModel):
    """
    A bank account exported to Google Sheets by Monzo, for example:

    ```YAML
    googlesheet_accounts:
    - country: GBP
      institution: Monzo
      name: personal
      sheet_name: Personal Account Transactions
      sheet_id: 1AbC...
      export_file: exports/personal.csv
    ```
    """

    country: str
    institution: str
    name: str
    sheet_name: str
    sheet_id: str | None = None
    export_file: str | None = None
    """CSV export of the sheet's A:P range, relative to the data directory"""

    def to_account(self) -> Account:
        return Account(
            account_type=AccountType.Assets,
            country=self.country,
            institution=self.institution,
            name=self.name,
        )


class PotImportConfig(SettingsBaseModel):
    country: str = constants.DEFAULT_OPERATING_CURRENCY
    institution: str = "Monzo"
    parent_account: str = "Personal"
    currency: str = constants.DEFAULT_OPERATING_CURRENCY


class UserSettings(SettingsBaseModel):
    """
    The settings file of a data directory, `beancount.yaml`.
    """

    start_date: datetime.date
    """The date every configured account is opened on"""
    title: str = constants.DEFAULT_TITLE
    operating_currency: str = constants.DEFAULT_OPERATING_CURRENCY
    googlesheet_accounts: list[GoogleSheetAccount] | None = None
    assets: list[Account] | None = None
    liabilities: list[Account] | None = None
    income: list[Account] | None = None
    expenses: list[Account] | None = None
    manual_accounts: list[str] | None = None
    """Names of hand-written ledger files in the include directory"""
    narration: str = constants.DEFAULT_NARRATION_TEMPLATE
    """Jinja2 template rendered with the transaction fields"""
    pots: PotImportConfig = PotImportConfig()


@dataclasses.dataclass(frozen=True)
class SkippedRow:
    # the sheet account name or file the row came from
    source: str
    # 1-based row number in the source, header included
    row_number: int | None
    error: Exception


@dataclasses.dataclass(frozen=True)
class AccountLedger:
    account: GoogleSheetAccount
    directives: tuple[Directive, ...]
    skipped: tuple[SkippedRow, ...] = ()
    # one Expenses account per category seen in the sheet
    expense_accounts: tuple[Account, ...] = ()


@dataclasses.dataclass(frozen=True)
class FailedAccount:
    account: GoogleSheetAccount
    error: Exception


@dataclasses.dataclass(frozen=True)
class LedgerReport:
    main_file: pathlib.Path
    accounts: tuple[AccountLedger, ...]
    failed: tuple[FailedAccount, ...] = ()

    @property
    def transaction_count(self) -> int:
        return sum(len(ledger.directives) for ledger in self.accounts)

    @property
    def skipped(self) -> list[SkippedRow]:
        return [row for ledger in self.accounts for row in ledger.skipped]
