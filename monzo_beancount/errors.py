import typing


class LedgerError(Exception):
    pass


class ParseError(LedgerError):
    def __init__(self, field: str, value: typing.Any, reason: str | None = None):
        super().__init__(field, value, reason)
        self.field = field
        self.value = value
        self.reason = reason

    def __str__(self):
        message = f"Failed to parse {self.field} from {self.value!r}"
        if self.reason is not None:
            message += f": {self.reason}"
        return message


class CategorySplitError(ParseError):
    def __init__(self, value: typing.Any, reason: str):
        super().__init__("category_split", value, reason)


class AmbiguousAccountError(LedgerError):
    def __init__(self, name: str, matches: int):
        super().__init__(name, matches)
        self.name = name
        self.matches = matches

    def __str__(self):
        return f"Expected exactly one account named {self.name!r}, found {self.matches}"


class ConfigurationError(LedgerError):
    pass


class UnbalancedPostingsError(LedgerError):
    def __init__(self, transaction_id: str, total: typing.Any):
        super().__init__(transaction_id, total)
        self.transaction_id = transaction_id
        self.total = total

    def __str__(self):
        return f"Postings of transaction {self.transaction_id} do not balance (sum {self.total})"
