import numpy as np
import pint
import pytest

from bufkit.data import ParameterTableValidator, get_schema, list_schemas
from bufkit.exceptions import DataError
from bufkit.parameters import (
    Parameter,
    ParameterGroup,
    ParameterTable,
    load_parameter_table,
    parameter_table,
)
from bufkit.units import unit_registry as ureg


def test_parameter_group_conversion():
    assert ParameterGroup.convert("profile") is ParameterGroup.PROFILE
    assert ParameterGroup.convert("SURFACE") is ParameterGroup.SURFACE
    assert ParameterGroup.convert(ParameterGroup.INDEX) is ParameterGroup.INDEX

    with pytest.raises(ValueError):
        ParameterGroup.convert("foo")

    with pytest.raises(TypeError):
        ParameterGroup.convert(1)


def test_parameter_construct():
    p = Parameter("TMPC", "Temperature (C)", "profile", "degC")
    assert p.group is ParameterGroup.PROFILE
    assert p.pint_units == ureg.degC

    # Unitless parameters are dimensionless
    p = Parameter("SWET", "SWEAT index", "index")
    assert p.units is None
    assert p.pint_units == ureg.dimensionless

    # Invalid mnemonics are rejected
    with pytest.raises(ValueError):
        Parameter("tmpc", "Temperature (C)", "profile", "degC")

    # Empty descriptions are rejected
    with pytest.raises(ValueError):
        Parameter("TMPC", "", "profile", "degC")

    # Unknown units are rejected
    with pytest.raises(ValueError):
        Parameter("TMPC", "Temperature (C)", "profile", "not_a_unit")


def test_parameter_quantity():
    p = Parameter("TMPC", "Temperature (C)", "profile", "degC")

    # Offset units are handled
    q = p.quantity(8.04)
    assert q.units == ureg.degC
    assert q.to("K").magnitude == pytest.approx(281.19)

    # Arrays are converted to float arrays
    q = p.quantity([1, 2, 3])
    assert isinstance(q.magnitude, np.ndarray)
    assert q.magnitude.dtype == float

    # Quantities are converted to the parameter's units
    q = p.quantity(ureg.Quantity(273.15, "K"))
    assert q.units == ureg.degC
    assert q.magnitude == pytest.approx(0.0)

    # Offset units convert to each other
    assert p.quantity(ureg.Quantity(5.0, "degC")).magnitude == pytest.approx(5.0)
    q = p.quantity(ureg.Quantity(212.0, "degF"))
    assert q.units == ureg.degC
    assert q.magnitude == pytest.approx(100.0)

    # Incompatible quantities raise
    with pytest.raises(pint.DimensionalityError):
        p.quantity(ureg.Quantity(1.0, "m"))
    with pytest.raises(pint.DimensionalityError):
        p.quantity(ureg.Quantity(1.0, "J/kg"))


def test_parameter_table_get():
    table = parameter_table()
    assert parameter_table() is table

    cape = table.get("CAPE")
    assert cape.group is ParameterGroup.INDEX
    assert cape.units == "J/kg"
    assert table.get("SKNT").units == "knot"

    # PRES is both a profile and a surface parameter
    with pytest.raises(ValueError):
        table.get("PRES")
    assert table.get("PRES", "profile").group is ParameterGroup.PROFILE
    assert table.get("PRES", ParameterGroup.SURFACE).group is ParameterGroup.SURFACE

    # Unknown mnemonics raise
    with pytest.raises(KeyError):
        table.get("FOO")
    with pytest.raises(KeyError):
        table.get("CAPE", "surface")

    assert "CAPE" in table
    assert "FOO" not in table


def test_parameter_table_groups():
    table = parameter_table()

    assert table.mnemonics("header") == ["SNPARM", "STNPRM"]
    assert table.mnemonics("index") == [
        "SHOW",
        "LIFT",
        "SWET",
        "KINX",
        "LCLP",
        "PWAT",
        "TOTL",
        "CAPE",
        "LCLT",
        "CINS",
        "EQLV",
        "LFCT",
        "BRCH",
    ]
    assert table.mnemonics("profile")[:3] == ["PRES", "TMPC", "TMWC"]
    assert table.mnemonics("surface")[:2] == ["STN", "YYMMDD/HHMM"]

    # Several groups can be requested at once, document order is preserved
    both = table.group(["station", "header"])
    assert [p.mnemonic for p in both][:3] == ["SNPARM", "STNPRM", "STID"]
    assert len(table) == sum(len(table.group(g)) for g in ParameterGroup)


def test_parameter_table_find():
    table = parameter_table()

    # Mnemonic search is case-insensitive
    assert [p.mnemonic for p in table.find("cape")] == ["CAPE"]

    # Search covers descriptions
    mnemonics = [p.mnemonic for p in table.find("lifted index")]
    assert "LIFT" in mnemonics

    assert table.find("no such parameter anywhere") == []


def test_parameter_table_unique():
    p = Parameter("TMPC", "Temperature (C)", "profile", "degC")

    with pytest.raises(DataError):
        ParameterTable([p, p])

    # The same mnemonic may appear in different groups
    q = Parameter("TMPC", "Temperature (C)", "surface", "degC")
    assert len(ParameterTable([p, q])) == 2


def test_schemas():
    assert "parameter_table" in list_schemas()

    with pytest.raises(KeyError):
        get_schema("foo")


def test_parameter_table_validator():
    v = ParameterTableValidator(get_schema("parameter_table"))
    entry = {"mnemonic": "TMPC", "description": "Temperature (C)", "units": "degC"}
    empty = {"header": [], "station": [], "index": [], "surface": []}

    assert v.validate({**empty, "profile": [entry]})

    # Duplicate mnemonics within a group are reported
    assert not v.validate({**empty, "profile": [entry, entry]})

    # Invalid units are reported
    assert not v.validate({**empty, "profile": [{**entry, "units": "not_a_unit"}]})

    # Null units are accepted
    assert v.validate({**empty, "profile": [{**entry, "units": None}]})


def test_load_parameter_table(tmp_path):
    path = tmp_path / "parameters.yml"
    path.write_text(
        "\n".join(
            [
                "header: []",
                "station: []",
                "index: []",
                "surface: []",
                "profile:",
                "  - mnemonic: TMPC",
                "    description: Temperature (C)",
                "    units: degC",
            ]
        )
    )
    table = load_parameter_table(path)
    assert len(table) == 1
    assert table.get("TMPC").group is ParameterGroup.PROFILE

    # Malformed tables raise
    duplicate = "\n  - mnemonic: TMPC\n    description: Duplicate\n    units: degC\n"
    path.write_text(path.read_text() + duplicate)
    with pytest.raises(DataError):
        load_parameter_table(path)
