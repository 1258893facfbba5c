"""
Console output shared by the ``bufkit`` commands. Long lines are not wrapped
so that file paths and valid times stay on one line.
"""

from rich.console import Console
from rich.markup import escape

console = Console(color_system=None, highlight=False, soft_wrap=True)
error_console = Console(
    stderr=True, color_system=None, highlight=False, soft_wrap=True
)


def section(title, newline=True):
    if newline:
        console.print()
    console.rule(f"── {title}", align="left")
    console.print()


def message(text):
    console.print(text)


def warning(text):
    error_console.print(text)


def report(path, error=None):
    """
    Print the outcome of a check performed on a file: a tick on success, a
    cross followed by the error message otherwise.
    """
    if error is None:
        console.print(f"✓ {escape(str(path))}")
    else:
        error_console.print(f"✗ {escape(str(path))}: {escape(str(error))}")
