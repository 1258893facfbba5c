"""
Reference table of the parameter mnemonics found in Bufkit files.

The table is static reference data: it is loaded once from the packaged
``data/parameters.yml`` file and never modified at runtime. Each entry pairs a
short fixed mnemonic (*e.g.* ``TMPC``) with a description and, when the format
states one, a unit of measure.

Examples
--------
>>> from bufkit.parameters import parameter_table
>>> table = parameter_table()
>>> table.get("CAPE").units
'J/kg'
>>> [p.mnemonic for p in table.group("profile")][:3]
['PRES', 'TMPC', 'TMWC']
"""

from __future__ import annotations

__all__ = [
    "Parameter",
    "ParameterGroup",
    "ParameterTable",
    "load_parameter_table",
    "parameter_table",
]

import enum
import logging
import re
import typing as t
from functools import lru_cache
from importlib.resources import files
from pathlib import Path

import attrs
import numpy as np
import pint
from pinttr.util import always_iterable
from ruamel.yaml import YAML

from .data import ParameterTableValidator, get_schema
from .exceptions import DataError
from .typing import PathLike
from .units import unit_registry as ureg

logger = logging.getLogger(__name__)

_MNEMONIC_RE = re.compile(r"^[A-Z0-9]+(/[A-Z0-9]+)?$")


class ParameterGroup(enum.Enum):
    """
    Sections of a Bufkit file in which a mnemonic can appear.

    The document groups parameters into sounding indices, sounding profile
    levels and surface parameters. The station header and file header blocks
    are listed separately because the reader needs their keys too.
    """

    HEADER = "header"  #: File header declarations (``SNPARM``, ``STNPRM``)
    STATION = "station"  #: Station block of each sounding
    INDEX = "index"  #: Sounding indices
    PROFILE = "profile"  #: Sounding profile levels
    SURFACE = "surface"  #: Surface parameters

    @staticmethod
    def convert(value: t.Any) -> ParameterGroup:
        """
        Attempt conversion of a value to a :class:`.ParameterGroup` instance.
        Strings are matched case-insensitively against member values.

        Raises
        ------
        ValueError
            If ``value`` is a string that matches no group.

        TypeError
            If no conversion protocol exists for ``value``.
        """
        if isinstance(value, ParameterGroup):
            return value
        elif isinstance(value, str):
            return ParameterGroup(value.lower())
        else:
            raise TypeError(
                f"Cannot convert a {type(value)} instance to ParameterGroup"
            )


def _is_mnemonic(_, attribute, value):
    if not _MNEMONIC_RE.match(value):
        raise ValueError(
            f"'{attribute.name}' must be an upper-case alphanumeric token, "
            f"got {value!r}"
        )


def _is_unit_string(_, attribute, value):
    if value is None:
        return
    try:
        ureg.Unit(value)
    except (pint.UndefinedUnitError, ValueError) as e:
        raise ValueError(
            f"'{attribute.name}' must be interpretable as units, got {value!r}"
        ) from e


@attrs.define(frozen=True)
class Parameter:
    """
    A single parameter definition.
    """

    #: Short fixed code identifying the parameter, *e.g.* ``"TMPC"``.
    mnemonic: str = attrs.field(validator=_is_mnemonic)

    #: Human-readable description.
    description: str = attrs.field(
        validator=[attrs.validators.instance_of(str), attrs.validators.min_len(1)]
    )

    #: Section in which the mnemonic appears.
    group: ParameterGroup = attrs.field(converter=ParameterGroup.convert)

    #: Units as a Pint-compatible string, or ``None`` if the format states none.
    units: str | None = attrs.field(default=None, validator=_is_unit_string)

    @property
    def pint_units(self) -> pint.Unit:
        """
        Units as a :class:`pint.Unit`; dimensionless if no unit is stated.
        """
        return ureg.dimensionless if self.units is None else ureg.Unit(self.units)

    def quantity(self, value) -> pint.Quantity:
        """
        Attach this parameter's units to a magnitude.

        Parameters
        ----------
        value : float or array-like
            Magnitude. Offset units (*e.g.* degrees Celsius) are handled
            correctly since the quantity is built with the registry's
            constructor.

        Returns
        -------
        quantity
        """
        if isinstance(value, pint.Quantity):
            return self.convert(value)
        if not np.isscalar(value):
            value = np.asarray(value, dtype=float)
        return ureg.Quantity(value, self.pint_units)

    def convert(self, value: pint.Quantity) -> pint.Quantity:
        """
        Convert a quantity to this parameter's units.

        Raises
        ------
        :class:`pint.DimensionalityError`
            If the quantity's units are not compatible with this parameter's.
        """
        if value.dimensionality != self.pint_units.dimensionality:
            raise pint.DimensionalityError(value.units, self.pint_units)
        return value.to(self.pint_units)


@attrs.define(frozen=True)
class ParameterTable:
    """
    Immutable collection of :class:`.Parameter` definitions, in document order.
    """

    parameters: tuple[Parameter, ...] = attrs.field(converter=tuple)

    @parameters.validator
    def _check_unique(self, attribute, value):
        seen = set()
        for parameter in value:
            key = (parameter.group, parameter.mnemonic)
            if key in seen:
                raise DataError(
                    f"mnemonic '{parameter.mnemonic}' appears more than once in "
                    f"group '{parameter.group.value}'"
                )
            seen.add(key)

    def __iter__(self) -> t.Iterator[Parameter]:
        return iter(self.parameters)

    def __len__(self) -> int:
        return len(self.parameters)

    def __contains__(self, mnemonic: object) -> bool:
        return any(p.mnemonic == mnemonic for p in self.parameters)

    def get(
        self, mnemonic: str, group: ParameterGroup | str | None = None
    ) -> Parameter:
        """
        Look up a parameter definition.

        Parameters
        ----------
        mnemonic : str
            Parameter mnemonic. Lookup is exact (mnemonics are upper case).

        group : :class:`.ParameterGroup` or str, optional
            Restrict the lookup to a group. Required if the mnemonic is used
            in several groups (*e.g.* ``PRES``).

        Returns
        -------
        :class:`.Parameter`

        Raises
        ------
        KeyError
            If the mnemonic is unknown (in the requested group).

        ValueError
            If ``group`` is not set and the mnemonic is ambiguous.
        """
        candidates = [p for p in self.parameters if p.mnemonic == mnemonic]

        if group is not None:
            group = ParameterGroup.convert(group)
            candidates = [p for p in candidates if p.group is group]

        if not candidates:
            where = f" in group '{group.value}'" if group is not None else ""
            raise KeyError(f"unknown parameter mnemonic '{mnemonic}'{where}")

        if len(candidates) > 1:
            groups = ", ".join(p.group.value for p in candidates)
            raise ValueError(
                f"mnemonic '{mnemonic}' is defined in several groups ({groups}); "
                "please specify the 'group' argument"
            )

        return candidates[0]

    def group(
        self, groups: ParameterGroup | str | t.Iterable[ParameterGroup | str]
    ) -> list[Parameter]:
        """
        Return the definitions belonging to one or several groups, in document
        order.
        """
        groups = {ParameterGroup.convert(g) for g in always_iterable(groups)}
        return [p for p in self.parameters if p.group in groups]

    def mnemonics(self, group: ParameterGroup | str) -> list[str]:
        """
        Return the mnemonics of a group, in document order.
        """
        return [p.mnemonic for p in self.group(group)]

    def find(self, text: str) -> list[Parameter]:
        """
        Case-insensitive search over mnemonics and descriptions.
        """
        text = text.lower()
        return [
            p
            for p in self.parameters
            if text in p.mnemonic.lower() or text in p.description.lower()
        ]


def load_parameter_table(path: PathLike | None = None) -> ParameterTable:
    """
    Load a parameter table from a YAML file.

    Parameters
    ----------
    path : path-like, optional
        Path to the YAML file. If unset, the table shipped with the package is
        loaded.

    Returns
    -------
    :class:`.ParameterTable`

    Raises
    ------
    :class:`.DataError`
        If the file does not conform to the ``parameter_table`` schema (*e.g.*
        duplicate mnemonics within a group or unknown units).
    """
    if path is None:
        path = files("bufkit") / "data/parameters.yml"

    yaml = YAML(typ="safe")
    with open(Path(path), "r") as f:
        document = yaml.load(f)

    validator = ParameterTableValidator(get_schema("parameter_table"))
    if not validator.validate(document):
        raise DataError(f"invalid parameter table '{path}': {validator.errors}")

    parameters = []
    for group in ParameterGroup:
        for entry in document[group.value]:
            parameters.append(Parameter(group=group, **entry))

    logger.debug("Loaded %d parameter definitions from '%s'", len(parameters), path)
    return ParameterTable(parameters)


@lru_cache(maxsize=1)
def parameter_table() -> ParameterTable:
    """
    Return the packaged parameter table. The table is loaded on first call and
    cached afterwards.
    """
    return load_parameter_table()
