"""
Default values of the bufkit settings. Each function is passed to the
``default`` argument of a Dynaconf validator.
"""

from __future__ import annotations


def missing_value(settings=None, validator=None) -> float:
    # GEMPAK missing data sentinel
    return -9999.0


def century(settings=None, validator=None) -> int:
    return 2000


def on_invalid(settings=None, validator=None) -> str:
    return "skip"
