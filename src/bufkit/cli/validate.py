"""
Validate one or several Bufkit files.
"""

import logging
from pathlib import Path
from typing import Annotated, List

import typer

from ..exceptions import BufkitError
from ..file import BufkitFile
from ._console import report, warning

logger = logging.getLogger(__name__)


def main(
    files: Annotated[
        List[Path], typer.Argument(help="Paths to the Bufkit files to validate.")
    ],
):
    """
    Validate one or several Bufkit files. The exit code is 1 if any file fails
    validation.
    """
    failed = 0

    for path in files:
        try:
            BufkitFile.load(path).validate_file_format()
        except (BufkitError, OSError) as e:
            logger.debug("Validation of '%s' failed", path, exc_info=True)
            report(path, e)
            failed += 1
        else:
            report(path)

    if failed:
        warning(f"{failed} of {len(files)} file(s) failed validation")
        raise typer.Exit(code=1)
