from __future__ import annotations

import enum
import typing as t

from dynaconf import Dynaconf, Validator

from . import _defaults


class InvalidPolicy(enum.Enum):
    """
    An enumeration defining what record iterators do when a record cannot be
    parsed.
    """

    @staticmethod
    def convert(value: t.Any) -> InvalidPolicy:
        """
        Convert a value to an :class:`.InvalidPolicy`. Strings are matched
        case-insensitively against member names; members pass through.

        Raises
        ------
        KeyError
            If ``value`` is a string that names no policy.

        TypeError
            If no conversion protocol exists for ``value``.
        """
        if isinstance(value, InvalidPolicy):
            return value
        elif isinstance(value, str):
            return InvalidPolicy[value.upper()]
        else:
            raise TypeError(f"Cannot convert a {type(value)} instance to InvalidPolicy")

    SKIP = "skip"  #: Log a warning and move on to the next record
    RAISE = "raise"  #: Propagate the parsing error


def _validate_century(value: int) -> bool:
    return value % 100 == 0


#: Main settings data structure. See the `Dynaconf documentation <https://www.dynaconf.com/>`__
#: for details.
settings = Dynaconf(
    settings_files=["bufkit.yml", "bufkit.yaml", "bufkit.toml"],
    envvar_prefix="BUFKIT",
    merge_enabled=True,
    validate_on_update=True,
    validators=[
        Validator(
            "MISSING_VALUE",
            cast=float,
            default=_defaults.missing_value,
        ),
        Validator(
            "CENTURY",
            cast=int,
            condition=_validate_century,
            default=_defaults.century,
        ),
        Validator(
            "ON_INVALID",
            cast=InvalidPolicy.convert,
            default=_defaults.on_invalid,
        ),
    ],
)
