import datetime
import pathlib
import typing

import pytest

from monzo_beancount.data_types import Transaction


def make_transaction(**kwargs) -> Transaction:
    values = dict(
        id="tx_0000",
        date=datetime.date(2024, 6, 13),
        payment_type="Card payment",
        name="Tesco",
        category="Groceries",
        amount=-1250,
        currency="GBP",
        local_amount=-1250,
        local_currency="GBP",
    )
    values.update(kwargs)
    return Transaction(**values)


@pytest.fixture
def construct_files() -> (
    typing.Callable[[pathlib.Path, typing.Dict[str, typing.Any]], None]
):
    def _construct_files(workdir: pathlib.Path, spec: typing.Dict[str, typing.Any]):
        for name, value in spec.items():
            if isinstance(value, str):
                with open(workdir / name, "wt", encoding="utf-8") as fo:
                    fo.write(value)
            elif isinstance(value, dict):
                sub_dir = workdir / name
                sub_dir.mkdir()
                _construct_files(sub_dir, value)
            else:
                raise ValueError()

    return _construct_files
