import dataclasses
import logging
import pathlib

from monzo_beancount import constants

STARTER_CONFIG = """\
start_date: "2024-01-01"
title: "Monzo Accounts"
operating_currency: "GBP"
googlesheet_accounts:
  - country: "GBP"
    institution: "Monzo"
    name: "personal"
    sheet_name: "Personal Account Transactions"
    sheet_id: "XXX"
    export_file: "exports/personal.csv"

assets: []
liabilities: []
income: []
expenses: []
"""


@dataclasses.dataclass(frozen=True)
class DataFilePaths:
    data_dir: pathlib.Path
    include_dir: pathlib.Path
    import_dir: pathlib.Path
    main_file: pathlib.Path
    config_file: pathlib.Path

    @classmethod
    def with_root(
        cls, data_dir: str | pathlib.Path, initialize: bool = False
    ) -> "DataFilePaths":
        data_dir = pathlib.Path(data_dir)
        paths = cls(
            data_dir=data_dir,
            include_dir=data_dir / constants.INCLUDE_DIR,
            import_dir=data_dir / constants.IMPORT_DIR,
            main_file=data_dir / constants.MAIN_FILE_NAME,
            config_file=data_dir / constants.CONFIG_FILE_NAME,
        )
        if initialize:
            paths.initialize()
        return paths

    def initialize(self):
        logger = logging.getLogger(__name__)
        self.include_dir.mkdir(parents=True, exist_ok=True)
        self.import_dir.mkdir(parents=True, exist_ok=True)
        self.main_file.write_text("", encoding="utf-8")
        if not self.config_file.exists():
            logger.info("Writing starter config to %s", self.config_file)
            self.config_file.write_text(STARTER_CONFIG, encoding="utf-8")

    def ledger_fragments(self) -> list[pathlib.Path]:
        if not self.include_dir.is_dir():
            return []
        return sorted(
            path
            for path in self.include_dir.iterdir()
            if path.is_file() and path.suffix == constants.BEANCOUNT_SUFFIX
        )

    def pot_csv_files(self) -> list[pathlib.Path]:
        if not self.import_dir.is_dir():
            return []
        return sorted(
            path
            for path in self.import_dir.iterdir()
            if path.is_file() and path.suffix == constants.CSV_SUFFIX
        )

    def fragment_for(self, csv_file: pathlib.Path) -> pathlib.Path:
        return self.include_dir / (csv_file.stem + constants.BEANCOUNT_SUFFIX)

    def resolve(self, relative: str | pathlib.Path) -> pathlib.Path:
        path = pathlib.Path(relative)
        if path.is_absolute():
            return path
        return self.data_dir / path

