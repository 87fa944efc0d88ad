import concurrent.futures
import dataclasses
import logging
import pathlib
import time
import typing

import pydantic
import rich
import yaml
from rich import box
from rich.logging import RichHandler
from rich.markup import escape
from rich.padding import Padding
from rich.table import Table

from monzo_beancount.assembler import build_account_ledger, build_ledger
from monzo_beancount.classifier import ClassifierAccounts
from monzo_beancount.csv_import import process_csv_file
from monzo_beancount.data_types import (
    AccountLedger,
    FailedAccount,
    GoogleSheetAccount,
    LedgerReport,
    SkippedRow,
    Transaction,
    UserSettings,
)
from monzo_beancount.environment import LOG_LEVEL_MAP, VERBOSE_LOG_LEVEL, LogLevel
from monzo_beancount.errors import ConfigurationError, LedgerError
from monzo_beancount.extractor import SheetExportExtractor
from monzo_beancount.formatter import directives_to_text
from monzo_beancount.normalizer import Row, normalize_rows
from monzo_beancount.paths import DataFilePaths
from monzo_beancount.templates import compile_template

TABLE_HEADER_STYLE = "yellow"
TABLE_COLUMN_STYLE = "cyan"
MAX_FETCH_WORKERS = 8

RowSource = typing.Callable[[GoogleSheetAccount], typing.Iterable[Row]]


@dataclasses.dataclass(frozen=True)
class ImportedPot:
    csv_file: pathlib.Path
    output_file: pathlib.Path
    directive_count: int
    skipped: tuple[SkippedRow, ...] = ()


class LedgerEngine:
    log_level: LogLevel = LogLevel.INFO
    logger: logging.Logger = logging.getLogger("monzo_beancount")
    paths: DataFilePaths
    config_path: pathlib.Path
    settings: UserSettings
    row_source: RowSource

    def __init__(
        self,
        workdir: str | pathlib.Path,
        config_path: str | pathlib.Path | None = None,
        log_level: str = "info",
        row_source: RowSource | None = None,
    ):
        self.paths = DataFilePaths.with_root(pathlib.Path(workdir).resolve())
        self.config_path = (
            self.paths.resolve(config_path)
            if config_path is not None
            else self.paths.config_file
        )
        self.log_level = LogLevel(log_level.lower())

        FORMAT = "%(message)s"
        logging.basicConfig(
            level=LOG_LEVEL_MAP[self.log_level],
            format=FORMAT,
            datefmt="[%X]",
            handlers=[RichHandler()],
            force=True,
        )
        self.settings = self.load_config(self.config_path)
        self.row_source = row_source or self.read_sheet_export

    def load_config(self, config_path: pathlib.Path) -> UserSettings:
        try:
            with config_path.open("rt", encoding="utf-8") as fo:
                doc_payload = yaml.safe_load(fo)
        except FileNotFoundError:
            raise ConfigurationError(
                f"Config file {config_path} not found, run `monzo-beancount init` first"
            )
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file {config_path} is not valid YAML: {exc}")

        try:
            settings = UserSettings.model_validate(doc_payload)
        except pydantic.ValidationError as exc:
            raise ConfigurationError(f"Invalid config file {config_path}:\n{exc}")
        compile_template(settings.narration)

        self.logger.info(
            "Loaded settings from [green]%s[/]",
            config_path,
            extra={"markup": True, "highlighter": None},
        )
        return settings

    def read_sheet_export(self, account: GoogleSheetAccount) -> list[Row]:
        if account.export_file is None:
            raise ConfigurationError(
                f"No export_file configured for sheet account {account.name}"
            )
        export_path = self.paths.resolve(account.export_file)
        with export_path.open("rt", newline="", encoding="utf-8") as fo:
            return list(SheetExportExtractor(fo).process())

    def load_account(
        self, account: GoogleSheetAccount, accounts: ClassifierAccounts
    ) -> AccountLedger:
        transactions: list[Transaction] = []
        skipped: list[SkippedRow] = []
        for item in normalize_rows(self.row_source(account), source=account.name):
            if isinstance(item, SkippedRow):
                self.logger.log(
                    VERBOSE_LOG_LEVEL,
                    "Skipped row %s of %s: %s",
                    item.row_number,
                    account.name,
                    item.error,
                )
                skipped.append(item)
            else:
                transactions.append(item)
        return build_account_ledger(
            account, transactions, accounts, self.settings, skipped=skipped
        )

    def load_accounts(
        self, accounts: ClassifierAccounts
    ) -> tuple[list[AccountLedger], list[FailedAccount]]:
        sheet_accounts = self.settings.googlesheet_accounts or []
        ledgers: list[AccountLedger] = []
        failed: list[FailedAccount] = []
        if not sheet_accounts:
            self.logger.warning("No sheet accounts configured")
            return ledgers, failed

        workers = min(MAX_FETCH_WORKERS, len(sheet_accounts))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self.load_account, sheet_account, accounts)
                for sheet_account in sheet_accounts
            ]
            # configuration order, not completion order
            for sheet_account, future in zip(sheet_accounts, futures):
                try:
                    ledger = future.result()
                except (LedgerError, OSError) as exc:
                    self.logger.error(
                        "Failed to load sheet account [red]%s[/]: %s",
                        escape(sheet_account.name),
                        escape(str(exc)),
                        extra={"markup": True, "highlighter": None},
                    )
                    failed.append(FailedAccount(account=sheet_account, error=exc))
                    continue
                self.logger.info(
                    "Loaded %s transactions from sheet account [green]%s[/]",
                    len(ledger.directives),
                    escape(sheet_account.name),
                    extra={"markup": True, "highlighter": None},
                )
                ledgers.append(ledger)
        return ledgers, failed

    def generate(self) -> LedgerReport:
        accounts = ClassifierAccounts.from_settings(self.settings)
        ledgers, failed = self.load_accounts(accounts)

        directives = build_ledger(
            self.settings,
            ledgers,
            include_dir=self.paths.include_dir,
            discovered=self.paths.ledger_fragments(),
        )
        self.paths.main_file.write_text(
            directives_to_text(directives), encoding="utf-8"
        )
        report = LedgerReport(
            main_file=self.paths.main_file,
            accounts=tuple(ledgers),
            failed=tuple(failed),
        )
        self.logger.info(
            "Wrote %s transactions to [green]%s[/]",
            report.transaction_count,
            self.paths.main_file,
            extra={"markup": True, "highlighter": None},
        )
        self.print_skipped(report.skipped)
        self.print_failed(report.failed)
        return report

    def import_csv(self) -> list[ImportedPot]:
        imported: list[ImportedPot] = []
        for csv_file in self.paths.pot_csv_files():
            try:
                directives, skipped = process_csv_file(csv_file, self.settings.pots)
            except LedgerError as exc:
                self.logger.error(
                    "Failed to import [red]%s[/]: %s",
                    csv_file.name,
                    escape(str(exc)),
                    extra={"markup": True, "highlighter": None},
                )
                continue
            output_file = self.paths.fragment_for(csv_file)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(directives_to_text(directives), encoding="utf-8")
            self.logger.info(
                "Imported [green]%s[/] into [green]%s[/]",
                csv_file.name,
                output_file.name,
                extra={"markup": True, "highlighter": None},
            )
            imported.append(
                ImportedPot(
                    csv_file=csv_file,
                    output_file=output_file,
                    directive_count=len(directives),
                    skipped=tuple(skipped),
                )
            )
        self.print_skipped([row for pot in imported for row in pot.skipped])
        return imported

    def serve(self, interval: float, iterations: int | None = None):
        count = 0
        while iterations is None or count < iterations:
            self.logger.info("Refreshing ledger ...")
            try:
                self.generate()
            except (LedgerError, OSError) as exc:
                self.logger.error("Failed to generate ledger: %s", exc)
            count += 1
            if iterations is None or count < iterations:
                time.sleep(interval)

    def print_skipped(self, skipped: typing.Sequence[SkippedRow]):
        if not skipped:
            return
        table = Table(
            title="Skipped rows",
            box=box.SIMPLE,
            header_style=TABLE_HEADER_STYLE,
            expand=True,
        )
        table.add_column("Source", style=TABLE_COLUMN_STYLE)
        table.add_column("Row", style=TABLE_COLUMN_STYLE)
        table.add_column("Error", style=TABLE_COLUMN_STYLE)
        for row in skipped:
            table.add_row(
                escape(row.source),
                str(row.row_number) if row.row_number is not None else "",
                escape(str(row.error)),
            )
        rich.print(Padding(table, (1, 0, 0, 4)))

    def print_failed(self, failed: typing.Sequence[FailedAccount]):
        if not failed:
            return
        table = Table(
            title="Failed accounts",
            box=box.SIMPLE,
            header_style=TABLE_HEADER_STYLE,
            expand=True,
        )
        table.add_column("Account", style=TABLE_COLUMN_STYLE)
        table.add_column("Sheet", style=TABLE_COLUMN_STYLE)
        table.add_column("Error", style=TABLE_COLUMN_STYLE)
        for item in failed:
            table.add_row(
                escape(item.account.name),
                escape(item.account.sheet_name),
                escape(str(item.error)),
            )
        rich.print(Padding(table, (1, 0, 0, 4)))
