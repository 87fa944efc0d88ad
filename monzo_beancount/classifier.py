import dataclasses
import typing

from monzo_beancount import constants
from monzo_beancount.data_types import (
    Account,
    Classification,
    IncomeAccount,
    IncomeGeneral,
    Savings,
    Transaction,
    TransferAsset,
    TransferOpeningBalance,
    TransferPot,
    UserSettings,
)
from monzo_beancount.errors import AmbiguousAccountError, ConfigurationError


@dataclasses.dataclass(frozen=True)
class ClassifierAccounts:
    """Configured accounts a counterparty name can be matched against"""

    assets: tuple[Account, ...]
    income: tuple[Account, ...]

    @classmethod
    def from_settings(cls, settings: UserSettings) -> "ClassifierAccounts":
        if settings.assets is None:
            raise ConfigurationError("No asset accounts configured")
        if settings.income is None:
            raise ConfigurationError("No income accounts configured")
        return cls(
            assets=filter_reserved_accounts(settings.assets),
            income=filter_reserved_accounts(settings.income),
        )


def filter_reserved_accounts(
    accounts: typing.Iterable[Account],
) -> tuple[Account, ...]:
    return tuple(
        account
        for account in accounts
        if account.name not in constants.RESERVED_ACCOUNT_NAMES
    )


def find_unique_account(accounts: typing.Iterable[Account], name: str) -> Account:
    matches = [account for account in accounts if account.name == name]
    if len(matches) != 1:
        raise AmbiguousAccountError(name=name, matches=len(matches))
    return matches[0]


def match_account(accounts: typing.Iterable[Account], name: str) -> Account | None:
    try:
        return find_unique_account(accounts, name)
    except AmbiguousAccountError:
        return None


def is_account_switch(txn: Transaction) -> bool:
    return (txn.notes or "").startswith(constants.ACCOUNT_SWITCH_MARKER)


def classify(
    asset_accounts: typing.Iterable[Account],
    income_accounts: typing.Iterable[Account],
    txn: Transaction,
) -> Classification | None:
    if txn.category == constants.INCOME_CATEGORY:
        income_account = match_account(
            filter_reserved_accounts(income_accounts), txn.name
        )
        if income_account is not None:
            return IncomeAccount(account=income_account)
        if is_account_switch(txn):
            return TransferOpeningBalance()
        return IncomeGeneral()

    elif txn.category == constants.SAVINGS_CATEGORY:
        return Savings()

    elif txn.category == constants.TRANSFERS_CATEGORY:
        if txn.payment_type == constants.POT_TRANSFER_PAYMENT_TYPE:
            return TransferPot()
        asset_account = match_account(
            filter_reserved_accounts(asset_accounts), txn.name
        )
        if asset_account is not None:
            return TransferAsset(account=asset_account)
        return TransferOpeningBalance()

    return None


def classify_transaction(
    accounts: ClassifierAccounts, txn: Transaction
) -> Classification | None:
    return classify(accounts.assets, accounts.income, txn)
