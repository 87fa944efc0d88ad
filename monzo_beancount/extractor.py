# an extractor wraps an open file and yields the raw records found in it
import contextlib
import csv
import datetime
import os
import typing

from monzo_beancount import constants
from monzo_beancount.data_types import PotRecord, SkippedRow
from monzo_beancount.errors import LedgerError, ParseError
from monzo_beancount.normalizer import (
    Row,
    currency_exponent,
    parse_minor_units,
    parse_string,
)


class ExtractorError(LedgerError):
    def __init__(self, filename: str | None, klass_name: str):
        super().__init__(filename, klass_name)
        self.filename = filename
        self.klass_name = klass_name


class ExtractorInvalidInputFileError(ExtractorError):
    def __str__(self):
        return f"{self.klass_name} does not accept input_file=None"


class ExtractorUnexpectedFieldsError(ExtractorError):
    def __str__(self):
        return f"File {self.filename} does not have the columns {self.klass_name} expects"


class ExtractorUnreadableFileError(ExtractorError):
    def __init__(self, filename: str | None, klass_name: str, reason: str):
        super().__init__(filename, klass_name)
        self.reason = reason

    def __str__(self):
        return f"{self.klass_name} failed to read {self.filename}: {self.reason}"


class ExtractorBase:
    input_file: typing.TextIO
    """The input file to be processed"""

    def __init__(self, input_file: typing.TextIO | None = None):
        if input_file is None:
            raise ExtractorInvalidInputFileError(
                filename=None, klass_name=self.__class__.__name__
            )
        self.input_file = input_file
        self.filename = getattr(self.input_file, "name", None)

    def rewind(self):
        self.input_file.seek(os.SEEK_SET, 0)

    @contextlib.contextmanager
    def reading(self):
        """
        Turn undecodable bytes and malformed CSV into an extractor error
        """
        try:
            yield
        except (UnicodeDecodeError, csv.Error) as exc:
            raise ExtractorUnreadableFileError(
                filename=self.filename,
                klass_name=self.__class__.__name__,
                reason=str(exc),
            ) from exc


class SheetExportExtractor(ExtractorBase):
    """
    Rows of a Google Sheet exported to CSV, header row included. The cells are
    left untouched, the normalizer owns their interpretation.
    """

    def process(self) -> typing.Generator[Row, None, None]:
        self.rewind()
        with self.reading():
            for row in csv.reader(self.input_file):
                yield row


class ExtractorCsvBase(ExtractorBase):
    """
    Base class for CSV extractors with a header row
    """

    date_format: str = constants.CSV_DATE_FORMAT
    """The date format the CSV file uses"""

    fields: typing.List[str]
    """The fields in the CSV file"""

    def parse_date(self, date_str: str) -> datetime.date:
        """
        Parse a date string using the self.date_format
        """
        try:
            return datetime.datetime.strptime(date_str.strip(), self.date_format).date()
        except (AttributeError, ValueError) as exc:
            raise ParseError("date", date_str, str(exc))

    def detect(self) -> bool:
        """
        Check if the input file is a CSV file with the expected fields
        """
        self.rewind()
        with self.reading():
            fieldnames = csv.DictReader(self.input_file).fieldnames
        return fieldnames is not None and set(self.fields) <= set(fieldnames)

    def process_line(self, lineno: int, line: dict):
        raise NotImplementedError()

    def process(self) -> typing.Generator[typing.Any, None, None]:
        if not self.detect():
            raise ExtractorUnexpectedFieldsError(
                filename=self.filename, klass_name=self.__class__.__name__
            )
        self.rewind()
        reader = csv.DictReader(self.input_file)
        with self.reading():
            # data starts on the second line of the file
            for lineno, line in enumerate(reader, start=2):
                try:
                    yield self.process_line(lineno, line)
                except ParseError as exc:
                    yield SkippedRow(
                        source=str(self.filename), row_number=lineno, error=exc
                    )


class PotCsvExtractor(ExtractorCsvBase):
    """
    Transactions of a Monzo pot, which the sheet export leaves out:

        date,description,amount,local_currency,local_amount,category
        2024-04-14,PATH TAPP PAYGO CP NEW JERSEY USA,-0.8,USD,-1.0,Transport
    """

    fields: typing.List[str] = constants.POT_CSV_FIELDS

    def __init__(
        self,
        input_file: typing.TextIO | None = None,
        currency: str = constants.DEFAULT_OPERATING_CURRENCY,
    ):
        super().__init__(input_file)
        self.currency = currency

    def process_line(self, lineno: int, line: dict[str, str]) -> PotRecord:
        local_currency = parse_string(line.get("local_currency"))
        local_amount = parse_string(line.get("local_amount"))
        return PotRecord(
            date=self.parse_date(line["date"]),
            description=parse_string(line.get("description")) or "",
            amount=parse_minor_units(
                line.get("amount"), currency_exponent(self.currency)
            ),
            local_currency=local_currency,
            local_amount=(
                parse_minor_units(
                    local_amount,
                    currency_exponent(local_currency),
                    field="local_amount",
                )
                if local_amount is not None
                else None
            ),
            category=parse_string(line.get("category")),
        )
