"""Exceptions and warnings specific to bufkit."""

# ------------------------------------------------------------------------------
#                                   Exceptions
# ------------------------------------------------------------------------------


class BufkitError(Exception):
    """Base class for all errors raised while handling Bufkit data."""

    pass


class ParseError(BufkitError):
    """Raised when a piece of Bufkit text cannot be parsed."""

    pass


class MissingColumnError(ParseError):
    """Raised when a section header lacks a required column."""

    def __init__(self, column, section="surface"):
        super().__init__(column, section)
        self.column = column
        self.section = section

    def __str__(self):
        return f"missing required column '{self.column}' in {self.section} header"


class ValidationError(BufkitError):
    """Raised when a file is parseable but fails a consistency check."""

    pass


class DataError(Exception):
    """Raised when encountering issues with packaged reference data."""

    pass


# ------------------------------------------------------------------------------
#                                   Warnings
# ------------------------------------------------------------------------------


class ParseWarning(UserWarning):
    """Used when a record is skipped or a value is reinterpreted while parsing."""

    pass
