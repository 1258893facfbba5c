from __future__ import annotations

import glob
import importlib.resources
from pathlib import Path

import cerberus
from ruamel.yaml import YAML

from ..units import unit_registry as ureg


def _load_schemas() -> None:
    schema_paths = sorted(
        Path(x)
        for x in glob.glob(
            str(importlib.resources.files("bufkit.data").joinpath("schemas/*.yml"))
        )
    )

    yaml = YAML(typ="safe")
    for path in schema_paths:
        name = path.stem
        with open(path, "r") as f:
            schema = yaml.load(f)
        cerberus.schema_registry.add(name, schema)


_load_schemas()


class ParameterTableValidator(cerberus.Validator):
    """
    This class validates the structure of the parameter reference table. In
    addition to the standard Cerberus rules, it checks that mnemonics are
    unique within a group and that unit strings are understood by the unit
    registry.
    """

    def _validate_unique_mnemonics(self, constraint, field, value):
        """
        Check that no mnemonic appears twice in a list of parameter entries.

        The rule's arguments are validated against this schema:
        {"type": "boolean"}
        """
        if not constraint or not isinstance(value, list):
            return

        seen = set()
        for entry in value:
            if not isinstance(entry, dict):
                continue
            mnemonic = entry.get("mnemonic")
            if mnemonic in seen:
                self._error(field, f"Duplicate mnemonic {mnemonic!r}")
            seen.add(mnemonic)

    def _validate_valid_units(self, constraint, field, value):
        """
        Check that a 'units' field can be interpreted by the unit registry.
        ``None`` is accepted and means that no unit is stated.

        The rule's arguments are validated against this schema:
        {"type": "boolean"}
        """
        if not constraint or value is None:
            return

        try:
            ureg.Unit(value)
        except Exception:
            self._error(field, f"Cannot convert {repr(value)} to valid units")


def list_schemas() -> list[str]:
    """
    List currently registered Cerberus schemas.
    """
    return sorted(cerberus.schema_registry._storage.keys())


def get_schema(name: str) -> dict:
    """
    Get a registered Cerberus schema by name.

    Raises
    ------
    KeyError
        If no schema is registered under ``name``.
    """
    schema = cerberus.schema_registry.get(name)
    if schema is None:
        raise KeyError(f"unknown schema {name!r}; registered: {list_schemas()}")
    return schema
