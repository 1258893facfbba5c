"""
Display the parameter reference table.
"""

from typing import Annotated, Optional

import typer
from rich.table import Table

from ..parameters import ParameterGroup, parameter_table
from ._console import console, warning


def main(
    group: Annotated[
        Optional[ParameterGroup],
        typer.Option("--group", "-g", help="Only list parameters of this group."),
    ] = None,
    search: Annotated[
        Optional[str],
        typer.Option(
            "--search", "-s", help="Only list parameters matching this text."
        ),
    ] = None,
):
    """
    Display the parameter reference table.
    """
    table = parameter_table()
    parameters = table.find(search) if search else list(table)
    if group is not None:
        parameters = [p for p in parameters if p.group is group]

    if not parameters:
        warning("No parameter matches the request.")
        raise typer.Exit(code=1)

    out = Table("Mnemonic", "Group", "Units", "Description")
    for p in parameters:
        out.add_row(p.mnemonic, p.group.value, p.units or "", p.description)

    console.print(out)
