import dataclasses
import functools

import jinja2
from jinja2.sandbox import SandboxedEnvironment

from monzo_beancount.data_types import Transaction
from monzo_beancount.errors import ConfigurationError
from monzo_beancount.normalizer import currency_exponent, format_minor_units


def as_major_units(minor: int, currency: str | None = None) -> str:
    return format_minor_units(minor, currency_exponent(currency))


def make_environment():
    env = SandboxedEnvironment()
    env.filters["as_major_units"] = as_major_units
    return env


@functools.lru_cache(maxsize=32)
def compile_template(template: str) -> jinja2.Template:
    try:
        return make_environment().from_string(template)
    except jinja2.TemplateSyntaxError as exc:
        raise ConfigurationError(
            f"Invalid template {template!r}: {exc.message} (line {exc.lineno})"
        )


def render_narration(template: str, txn: Transaction) -> str:
    try:
        return compile_template(template).render(**dataclasses.asdict(txn)).strip()
    except jinja2.TemplateError as exc:
        raise ConfigurationError(
            f"Failed to render template {template!r} for transaction {txn.id}: {exc}"
        )
