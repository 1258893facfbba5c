"""
The bufkit command-line interface, built with Typer and Rich.
"""

import logging
from enum import Enum
from typing import Optional

import typer
from rich.logging import RichHandler
from typing_extensions import Annotated

from ..config import InvalidPolicy, settings
from . import params, show, validate


class LogLevel(str, Enum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"
    NOTSET = "NOTSET"


app = typer.Typer(
    help="bufkit — Read Bufkit forecast sounding files.",
    pretty_exceptions_enable=False,
)


@app.callback(invoke_without_command=True)
def cli(
    ctx: typer.Context,
    log_level: Annotated[
        LogLevel, typer.Option(help="Set log level.")
    ] = LogLevel.WARNING,
    on_invalid: Annotated[
        Optional[InvalidPolicy],
        typer.Option(
            "--on-invalid",
            help="What to do with records that cannot be parsed "
            "(overrides the ON_INVALID setting).",
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Display version information and exit.",
        ),
    ] = False,
):
    if version:
        from bufkit import __version__

        print(f"bufkit version {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        ctx.exit()

    logging.basicConfig(
        level=log_level.name,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )

    if on_invalid is not None:
        settings.set("ON_INVALID", on_invalid)


app.command(name="params", help=params.__doc__)(params.main)
app.command(name="validate", help=validate.__doc__)(validate.main)
app.command(name="show", help=show.__doc__)(show.main)


def main():
    app()


if __name__ == "__main__":
    app()
