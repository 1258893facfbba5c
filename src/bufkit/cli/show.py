"""
Display a summary of the soundings held in a Bufkit file.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from ..exceptions import BufkitError
from ..file import BufkitFile
from ._console import console, message, section, warning


def _fmt(quantity, fmt=".1f"):
    return "—" if quantity is None else f"{quantity.magnitude:{fmt}}"


def main(
    file: Annotated[Path, typer.Argument(help="Path to a Bufkit file.")],
):
    """
    Display a summary of the soundings held in a Bufkit file.
    """
    try:
        soundings = BufkitFile.load(file).data().soundings()
    except (BufkitError, OSError) as e:
        warning(f"Could not read '{file}': {escape(str(e))}")
        raise typer.Exit(code=1)

    if not soundings:
        warning(f"'{file}' holds no sounding")
        raise typer.Exit(code=1)

    station = soundings[0].station
    section("Station", newline=False)
    message(f"• Identifier: {station.id or '—'}")
    message(f"• Number: {station.num if station.num is not None else '—'}")
    message(f"• Location: {station.lat}, {station.lon}")
    message(f"• Elevation: {station.elevation} m")

    section("Soundings")
    message(f"• Count: {len(soundings)}")
    message(f"• First valid time: {soundings[0].valid_time:%Y-%m-%d %H:%M} UTC")
    message(f"• Last valid time: {soundings[-1].valid_time:%Y-%m-%d %H:%M} UTC")

    out = Table("Valid time", "Lead (h)", "Levels", "CAPE", "PWAT", "MSLP")
    for sounding in soundings:
        out.add_row(
            f"{sounding.valid_time:%Y-%m-%d %H:%M}",
            "—" if sounding.lead_time is None else str(sounding.lead_time),
            str(sounding.n_levels),
            _fmt(sounding.index("CAPE"), ".0f"),
            _fmt(sounding.index("PWAT")),
            _fmt(sounding.mslp),
        )
    console.print()
    console.print(out)
