import dataclasses

from monzo_beancount import constants
from monzo_beancount.data_types import (
    Account,
    AccountType,
    Classification,
    IncomeAccount,
    IncomeGeneral,
    Posting,
    Postings,
    Savings,
    Transaction,
    TransferAsset,
    TransferOpeningBalance,
    TransferPot,
)
from monzo_beancount.errors import UnbalancedPostingsError
from monzo_beancount.normalizer import currency_exponent, minor_units_to_decimal


def to_posting(
    source: Account, txn: Transaction, classification: Classification | None
) -> Posting:
    """The leg money flows into, an expense of the source account by default"""
    account = Account(
        account_type=AccountType.Expenses,
        country=source.country,
        institution=source.institution,
        name=source.name,
        sub_account=txn.category or constants.UNCATEGORIZED,
    )
    amount = -txn.amount

    if isinstance(
        classification, (IncomeGeneral, IncomeAccount, TransferOpeningBalance)
    ):
        account = dataclasses.replace(
            account, account_type=AccountType.Assets, sub_account=None
        )
        amount = txn.amount
    elif isinstance(classification, Savings):
        account = dataclasses.replace(
            account,
            account_type=AccountType.Assets,
            sub_account=constants.SAVINGS_SUB_ACCOUNT,
        )
    elif isinstance(classification, TransferPot):
        account = dataclasses.replace(
            account, account_type=AccountType.Assets, sub_account=txn.name
        )
    elif isinstance(classification, TransferAsset):
        account = dataclasses.replace(
            account,
            account_type=AccountType.Assets,
            institution=classification.account.institution,
            name=classification.account.name,
            sub_account=None,
        )
    elif classification is not None:
        raise ValueError(f"Unexpected classification type {type(classification)}")

    return Posting(
        account=account,
        amount=minor_units_to_decimal(amount, currency_exponent(txn.currency)),
        currency=txn.currency,
        description=txn.description,
    )


def from_posting(
    source: Account, txn: Transaction, classification: Classification | None
) -> Posting:
    """The leg money flows out of, the source account itself by default"""
    account = Account(
        account_type=AccountType.Assets,
        country=source.country,
        institution=source.institution,
        name=source.name,
        transaction_id=txn.id,
    )
    amount = txn.amount

    if isinstance(classification, IncomeGeneral):
        account = dataclasses.replace(account, account_type=AccountType.Income)
        amount = -txn.amount
    elif isinstance(classification, IncomeAccount):
        account = dataclasses.replace(
            account,
            account_type=AccountType.Income,
            institution=classification.account.institution,
            name=txn.name,
        )
        amount = -txn.amount
    elif isinstance(classification, TransferOpeningBalance):
        account = dataclasses.replace(
            account,
            account_type=AccountType.Equity,
            name=constants.OPENING_BALANCES_ACCOUNT,
        )
        amount = -txn.amount
    elif isinstance(classification, (Savings, TransferPot, TransferAsset)):
        pass
    elif classification is not None:
        raise ValueError(f"Unexpected classification type {type(classification)}")

    return Posting(
        account=account,
        amount=minor_units_to_decimal(amount, currency_exponent(txn.currency)),
        currency=txn.currency,
    )


def make_postings(
    source: Account, txn: Transaction, classification: Classification | None
) -> Postings:
    postings = Postings(
        from_=from_posting(source, txn, classification),
        to=to_posting(source, txn, classification),
    )
    if postings.from_.currency == postings.to.currency:
        total = postings.from_.amount + postings.to.amount
        if total != 0:
            raise UnbalancedPostingsError(transaction_id=txn.id, total=total)
    return postings
