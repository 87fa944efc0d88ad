import decimal

import pytest

from monzo_beancount.data_types import Account
from monzo_beancount.data_types import AccountType
from monzo_beancount.data_types import Classification
from monzo_beancount.data_types import IncomeAccount
from monzo_beancount.data_types import IncomeGeneral
from monzo_beancount.data_types import Savings
from monzo_beancount.data_types import Transaction
from monzo_beancount.data_types import TransferAsset
from monzo_beancount.data_types import TransferOpeningBalance
from monzo_beancount.data_types import TransferPot
from monzo_beancount.formatter import account_to_text
from monzo_beancount.resolver import from_posting
from monzo_beancount.resolver import make_postings
from monzo_beancount.resolver import to_posting
from tests.conftest import make_transaction

SOURCE = Account(
    account_type=AccountType.Assets,
    country="GBP",
    institution="Monzo",
    name="Personal",
)
CHASE = Account(
    account_type=AccountType.Assets,
    country="GBP",
    institution="Chase",
    name="Chase Saver",
)
ACME = Account(
    account_type=AccountType.Income,
    country="GBP",
    institution="Acme",
    name="Acme Ltd",
)


@pytest.mark.parametrize(
    "txn, classification, expected",
    [
        (
            make_transaction(category="Groceries", amount=-1250),
            None,
            (
                ("Assets:GBP:Monzo:Personal", "-12.50"),
                ("Expenses:GBP:Monzo:Personal:Groceries", "12.50"),
            ),
        ),
        (
            make_transaction(category="Eating out", amount=-870),
            None,
            (
                ("Assets:GBP:Monzo:Personal", "-8.70"),
                ("Expenses:GBP:Monzo:Personal:EatingOut", "8.70"),
            ),
        ),
        (
            # refunds flow back out of the expense account
            make_transaction(category="Shopping", amount=2500),
            None,
            (
                ("Assets:GBP:Monzo:Personal", "25.00"),
                ("Expenses:GBP:Monzo:Personal:Shopping", "-25.00"),
            ),
        ),
        (
            make_transaction(category="", amount=-100),
            None,
            (
                ("Assets:GBP:Monzo:Personal", "-1.00"),
                ("Expenses:GBP:Monzo:Personal:Uncategorized", "1.00"),
            ),
        ),
        (
            make_transaction(category="Income", name="HMRC", amount=50000),
            IncomeGeneral(),
            (
                ("Income:GBP:Monzo:Personal", "-500.00"),
                ("Assets:GBP:Monzo:Personal", "500.00"),
            ),
        ),
        (
            make_transaction(category="Income", name="Acme Ltd", amount=200000),
            IncomeAccount(account=ACME),
            (
                ("Income:GBP:Acme:AcmeLtd", "-2000.00"),
                ("Assets:GBP:Monzo:Personal", "2000.00"),
            ),
        ),
        (
            make_transaction(
                category="Income",
                name="Barclays",
                notes="Account Switch",
                amount=123456,
            ),
            TransferOpeningBalance(),
            (
                ("Equity:OpeningBalances", "-1234.56"),
                ("Assets:GBP:Monzo:Personal", "1234.56"),
            ),
        ),
        (
            make_transaction(category="Savings", name="Savings Pot", amount=-5000),
            Savings(),
            (
                ("Assets:GBP:Monzo:Personal", "-50.00"),
                ("Assets:GBP:Monzo:Personal:Savings", "50.00"),
            ),
        ),
        (
            make_transaction(
                category="Transfers",
                name="Essential Fixed",
                payment_type="Pot transfer",
                amount=-3000,
            ),
            TransferPot(),
            (
                ("Assets:GBP:Monzo:Personal", "-30.00"),
                ("Assets:GBP:Monzo:Personal:EssentialFixed", "30.00"),
            ),
        ),
        (
            make_transaction(category="Transfers", name="Chase Saver", amount=-10000),
            TransferAsset(account=CHASE),
            (
                ("Assets:GBP:Monzo:Personal", "-100.00"),
                ("Assets:GBP:Chase:ChaseSaver", "100.00"),
            ),
        ),
        (
            make_transaction(category="Transfers", name="Someone", amount=7500),
            TransferOpeningBalance(),
            (
                ("Equity:OpeningBalances", "-75.00"),
                ("Assets:GBP:Monzo:Personal", "75.00"),
            ),
        ),
        (
            make_transaction(
                category="Groceries",
                amount=-1000,
                currency="JPY",
                local_amount=-1000,
                local_currency="JPY",
            ),
            None,
            (
                ("Assets:GBP:Monzo:Personal", "-1000"),
                ("Expenses:GBP:Monzo:Personal:Groceries", "1000"),
            ),
        ),
    ],
)
def test_make_postings(
    txn: Transaction,
    classification: Classification | None,
    expected: tuple[tuple[str, str], tuple[str, str]],
):
    postings = make_postings(SOURCE, txn, classification)
    assert (
        (account_to_text(postings.from_.account), str(postings.from_.amount)),
        (account_to_text(postings.to.account), str(postings.to.amount)),
    ) == expected
    assert postings.from_.amount + postings.to.amount == 0
    assert postings.from_.currency == postings.to.currency == txn.currency


def test_from_posting_keeps_transaction_id():
    txn = make_transaction(id="tx_abc")
    posting = from_posting(SOURCE, txn, None)
    assert posting.account.transaction_id == "tx_abc"
    assert posting.description is None


def test_to_posting_carries_description():
    txn = make_transaction(description="TESCO STORES 1234")
    posting = to_posting(SOURCE, txn, None)
    assert posting.description == "TESCO STORES 1234"
    assert posting.amount == decimal.Decimal("12.50")


@pytest.mark.parametrize(
    "classification",
    [
        None,
        IncomeGeneral(),
        IncomeAccount(account=ACME),
        Savings(),
        TransferOpeningBalance(),
        TransferPot(),
        TransferAsset(account=CHASE),
    ],
)
def test_make_postings_balance(classification: Classification | None):
    for amount in (-1, 0, 1, -999999, 123456789):
        txn = make_transaction(amount=amount, local_amount=amount)
        postings = make_postings(SOURCE, txn, classification)
        assert postings.from_.amount + postings.to.amount == 0


def test_make_postings_unknown_classification():
    with pytest.raises(ValueError):
        make_postings(SOURCE, make_transaction(), "Savings")
