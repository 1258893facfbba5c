from __future__ import annotations

__all__ = [
    "symbol",
    "to_quantity",
    "units_compatible",
    "unit_registry",
]

import logging
from importlib.resources import files

import numpy as np
import pint
import xarray
from pinttr.util import units_compatible

logger = logging.getLogger(__name__)

# -- Global data members -------------------------------------------------------

#: Unit registry common to all bufkit components. All units used in bufkit
#: must be created using this registry.
unit_registry = pint.get_application_registry()


def _read_definitions(path) -> list[str]:
    # One definition per line; trailing comments and blank lines are dropped
    with open(path, "r") as f:
        lines = (line.split("#", 1)[0].strip() for line in f)
        return [line for line in lines if line]


def _extend_registry(ureg: pint.UnitRegistry, definitions: list[str]) -> None:
    for definition in definitions:
        name, reference = (x.strip() for x in definition.split("=")[:2])

        # Names already known with the same magnitude are left alone
        if name in ureg and ureg.Quantity(1.0, name) == ureg.Quantity(
            1.0, reference
        ):
            logger.debug("Unit '%s' already defined, skipping", name)
            continue

        ureg.define(definition)


_extend_registry(unit_registry, _read_definitions(files("bufkit") / "units.txt"))


# -- Public functions ----------------------------------------------------------


def symbol(units: pint.Unit | str | None) -> str:
    """
    Normalize a string or Pint units to a symbol string.

    Parameters
    ----------
    units : :class:`pint.Unit` or str or None
        Value to convert to a symbol string. ``None`` is interpreted as
        dimensionless.

    Returns
    -------
    str
        Symbol string (*e.g.* ``'hPa'`` for ``'hectopascal'``, ``'m / s'`` for
        ``'m/s'``, etc.).
    """
    if units is None:
        return ""
    units = unit_registry.Unit(units)
    return format(units, "~")


def to_quantity(da: xarray.DataArray) -> pint.Quantity:
    """
    Convert a :class:`~xarray.DataArray` to a :class:`~pint.Quantity`.

    Variables produced by :meth:`.Sounding.to_dataset` carry their Bufkit
    mnemonic and group: units are then taken from the parameter table, which
    avoids parsing display symbols such as ``°C``. Other arrays must have a
    ``units`` attribute.

    Raises
    ------
    ValueError
        If the units of the array cannot be determined.
    """
    mnemonic = da.attrs.get("bufkit_mnemonic")
    group = da.attrs.get("bufkit_group")

    if mnemonic is not None and group is not None:
        from .parameters import parameter_table

        return parameter_table().get(mnemonic, group).quantity(np.asarray(da.values))

    try:
        units = da.attrs["units"]
    except KeyError as e:
        raise ValueError("this DataArray has no 'units' metadata field") from e
    else:
        return unit_registry.Quantity(np.asarray(da.values), units)
