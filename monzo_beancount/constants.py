INCOME_CATEGORY = "Income"
SAVINGS_CATEGORY = "Savings"
TRANSFERS_CATEGORY = "Transfers"
NON_EXPENSE_CATEGORIES = frozenset(
    [INCOME_CATEGORY, SAVINGS_CATEGORY, TRANSFERS_CATEGORY]
)
POT_TRANSFER_PAYMENT_TYPE = "Pot transfer"
# notes prefix Monzo writes when money arrives from switching another bank account
ACCOUNT_SWITCH_MARKER = "Account Switch"
# the sheet accounts themselves, never a match for a counterparty
RESERVED_ACCOUNT_NAMES = frozenset(["Business", "Personal"])
SAVINGS_SUB_ACCOUNT = "Savings"
UNCATEGORIZED = "Uncategorized"
OPENING_BALANCES_ACCOUNT = "Opening Balances"

SHEET_DATE_FORMAT = "%d/%m/%Y"
CSV_DATE_FORMAT = "%Y-%m-%d"
SHEET_RANGE = "A:P"
SHEET_LAYOUT = dict(
    id=0,
    date=1,
    payment_type=3,
    name=4,
    category=6,
    amount=7,
    currency=8,
    local_amount=9,
    local_currency=10,
    notes=11,
    description=14,
    category_split=15,
)
POT_CSV_FIELDS = [
    "date",
    "description",
    "amount",
    "local_currency",
    "local_amount",
    "category",
]
TRANSFER_DESCRIPTION_PREFIXES = ("Withdrawal", "Deposit")

DEFAULT_MINOR_EXPONENT = 2
# minor-unit amounts above this many digits are rejected, Decimal quantize
# works with 28 significant digits
MAX_MINOR_UNIT_DIGITS = 18
CURRENCY_EXPONENTS = dict(
    BHD=3,
    CLP=0,
    ISK=0,
    JPY=0,
    KRW=0,
    KWD=3,
    OMR=3,
    TND=3,
    VND=0,
)

ACCOUNT_COLUMN_WIDTH = 50
AMOUNT_COLUMN_WIDTH = 12
TRANSACTION_ID_KEY = "transaction-id"
DEFAULT_TITLE = "Monzo Accounts"
DEFAULT_OPERATING_CURRENCY = "GBP"
DEFAULT_NARRATION_TEMPLATE = "{{ notes | default(description, true) | default('', true) }}"

INCLUDE_DIR = "include"
IMPORT_DIR = "import"
MAIN_FILE_NAME = "main.beancount"
CONFIG_FILE_NAME = "beancount.yaml"
BEANCOUNT_SUFFIX = ".beancount"
CSV_SUFFIX = ".csv"
