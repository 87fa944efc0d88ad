import json
import re
import typing

from monzo_beancount import constants
from monzo_beancount.data_types import (
    Account,
    AccountType,
    BalanceDirective,
    CloseDirective,
    CommentDirective,
    Directive,
    IncludeDirective,
    OpenDirective,
    OptionDirective,
    Posting,
    TransactionDirective,
)
from monzo_beancount.errors import ConfigurationError

# runs of letters or runs of digits, in any script
WORD_PATTERN = re.compile(r"[^\W\d_]+|\d+")


def split_case(run: str) -> list[str]:
    """Split a run of letters on case changes, NSIPremium -> NSI, Premium"""
    words = []
    start = 0
    for index in range(1, len(run)):
        previous, char = run[index - 1], run[index]
        following = run[index + 1 : index + 2]
        if char.isupper() and (
            previous.islower() or (previous.isupper() and following.islower())
        ):
            words.append(run[start:index])
            start = index
    words.append(run[start:])
    return words


def split_words(value: str) -> list[str]:
    """Split on separators and case boundaries, "NSI Premium-bonds" -> NSI, Premium, bonds"""
    return [word for run in WORD_PATTERN.findall(value) for word in split_case(run)]


def pascal_case(value: str) -> str:
    return "".join(word.capitalize() for word in split_words(value))


def title_case(value: str) -> str:
    return " ".join(word.capitalize() for word in split_words(value))


def account_to_text(account: Account) -> str:
    if account.account_type == AccountType.Equity:
        return f"{account.account_type.value}:{pascal_case(account.name)}"
    components = [
        account.account_type.value,
        account.country.upper(),
        pascal_case(account.institution),
        pascal_case(account.name),
    ]
    if not all(components):
        raise ConfigurationError(
            f"Account {account.institution!r}/{account.name!r} renders an empty component"
        )
    if account.sub_account is not None:
        components.append(pascal_case(account.sub_account) or constants.UNCATEGORIZED)
    return ":".join(components)


def quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def comment_line(comment: str | None) -> str:
    if comment is None:
        return ""
    return f"; {comment}.\n"


def posting_to_text(posting: Posting) -> str:
    account = account_to_text(posting.account)
    width = constants.ACCOUNT_COLUMN_WIDTH
    amount_width = constants.AMOUNT_COLUMN_WIDTH
    return f"  {account:<{width}} {str(posting.amount):>{amount_width}} {posting.currency}"


def txn_to_text(txn: TransactionDirective) -> str:
    columns = [
        txn.date.isoformat(),
        txn.flag,
        *((quote(txn.payee),) if txn.payee is not None else ()),
        quote(txn.notes),
    ]
    line = " ".join(columns)
    if txn.comment:
        line += f" ; {txn.comment}"
    return "\n".join(
        [
            line,
            *(
                (f"  {constants.TRANSACTION_ID_KEY}: {quote(txn.transaction_id)}",)
                if txn.transaction_id is not None
                else ()
            ),
            posting_to_text(txn.postings.to),
            posting_to_text(txn.postings.from_),
        ]
    )


def directive_to_text(directive: Directive) -> str:
    width = constants.ACCOUNT_COLUMN_WIDTH
    if isinstance(directive, OptionDirective):
        return f"option {quote(directive.key)} {quote(directive.value)}\n"
    elif isinstance(directive, IncludeDirective):
        return f"include {quote(directive.path)}\n"
    elif isinstance(directive, CommentDirective):
        return f"\n* {title_case(directive.text)}\n\n"
    elif isinstance(directive, OpenDirective):
        account = account_to_text(directive.account)
        return (
            f"{comment_line(directive.comment)}"
            f"{directive.date.isoformat()} open {account:<{width}} {directive.account.country}\n"
        )
    elif isinstance(directive, CloseDirective):
        account = account_to_text(directive.account)
        return (
            f"{comment_line(directive.comment)}"
            f"{directive.date.isoformat()} close {account:<{width}}\n"
        )
    elif isinstance(directive, TransactionDirective):
        return f"{txn_to_text(directive)}\n\n"
    elif isinstance(directive, BalanceDirective):
        account = account_to_text(directive.account)
        currency = directive.currency or directive.account.country
        return (
            f"{directive.date.isoformat()} balance {account:<{width}} "
            f"{str(directive.amount):>{constants.AMOUNT_COLUMN_WIDTH}} {currency}\n"
        )
    else:
        raise ValueError(f"Unexpected directive type {type(directive)}")


def directives_to_text(directives: typing.Iterable[Directive]) -> str:
    return "".join(map(directive_to_text, directives))
