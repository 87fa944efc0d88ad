import json
import os
import pathlib

import click

from monzo_beancount.data_types import UserSettings
from monzo_beancount.engine import LedgerEngine
from monzo_beancount.environment import LOG_LEVEL_MAP
from monzo_beancount.errors import ConfigurationError
from monzo_beancount.paths import DataFilePaths


def engine_options(func):
    func = click.option(
        "-l",
        "--log-level",
        type=click.Choice(
            list(map(lambda key: key.value, LOG_LEVEL_MAP.keys())),
            case_sensitive=False,
        ),
        default=lambda: os.environ.get("LOG_LEVEL", "info").lower(),
    )(func)
    func = click.option(
        "-c",
        "--config",
        type=click.Path(),
        default=None,
        help="The path to the settings file, defaults to beancount.yaml in the data directory",
    )(func)
    func = click.option(
        "-w",
        "--workdir",
        type=click.Path(exists=True, dir_okay=True, file_okay=False),
        default=lambda: os.environ.get("DATA_DIR", str(pathlib.Path.cwd())),
        help="The data directory to work on",
    )(func)
    return func


def make_engine(workdir: str, config: str | None, log_level: str) -> LedgerEngine:
    try:
        return LedgerEngine(workdir=workdir, config_path=config, log_level=log_level)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))


@click.group()
def cli():
    pass


@cli.command(name="generate")
@engine_options
def generate_cmd(workdir: str, config: str | None, log_level: str):
    """
    (Re)generate the main ledger file from the sheet exports:

        > tree .
        data/
            ├── beancount.yaml
            ├── exports/
            │   ├── personal.csv
            ├── include/
            │   ├── savings.beancount
            ├── import/
            │   ├── essential-fixed-pot.csv
            ├── main.beancount

        > monzo-beancount generate -w data
        > bean-check data/main.beancount
    """
    engine = make_engine(workdir, config, log_level)
    try:
        engine.generate()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))


@cli.command(name="import")
@engine_options
def import_cmd(workdir: str, config: str | None, log_level: str):
    """
    Convert the pot CSV files in the import directory into ledger files in
    the include directory. Expected columns:

        date,description,amount,local_currency,local_amount,category
    """
    engine = make_engine(workdir, config, log_level)
    engine.import_csv()


@cli.command(name="init")
@click.option(
    "-w",
    "--workdir",
    type=click.Path(file_okay=False),
    default=lambda: os.environ.get("DATA_DIR", str(pathlib.Path.cwd() / "beancount")),
    help="The data directory to create",
)
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
def init_cmd(workdir: str, yes: bool):
    """Create the data directory layout and a starter settings file."""
    paths = DataFilePaths.with_root(pathlib.Path(workdir))
    if paths.config_file.exists() and not yes:
        click.confirm(
            f"Configuration {paths.config_file} already exists. Continue?",
            abort=True,
        )
    paths.initialize()
    for name in ("data_dir", "include_dir", "import_dir", "main_file", "config_file"):
        click.echo(f"{name}: {getattr(paths, name)}")


@cli.command(name="server")
@engine_options
@click.option(
    "-i",
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=10.0,
    show_default=True,
    help="Seconds between two refreshes",
)
def server_cmd(workdir: str, config: str | None, log_level: str, interval: float):
    """Regenerate the main ledger file periodically until interrupted."""
    engine = make_engine(workdir, config, log_level)
    try:
        engine.serve(interval=interval)
    except KeyboardInterrupt:
        engine.logger.info("Received Ctrl-C, shutting down.")


@cli.command(name="schema")
@click.option("-o", "--output", type=click.Path(), default="schema.json")
def schema_cmd(output: str):
    """Write the JSON schema of the settings file."""
    with open(output, "w") as f:
        f.write(json.dumps(UserSettings.model_json_schema(), indent=2))


if __name__ == "__main__":
    cli()
