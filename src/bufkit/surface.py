"""
Parsing of the surface section of a Bufkit file.

The surface section starts with a header of column mnemonics (``STN
YYMMDD/HHMM PMSL PRES ...``) wrapped over several lines, followed by one
record per valid time. Records are whitespace-separated and may also wrap
over several lines, so they are delimited by counting tokens.
"""

from __future__ import annotations

import logging
import typing as t
from datetime import datetime

import attrs
import pint

from ._parse_util import chunks, is_number, parse_float, parse_int, parse_valid_time
from .config import InvalidPolicy, settings
from .exceptions import BufkitError, MissingColumnError, ParseError, ValidationError
from .parameters import ParameterGroup, parameter_table

logger = logging.getLogger(__name__)

#: Mnemonic of the station number column.
STATION_COLUMN = "STN"

#: Mnemonic of the valid time column.
TIME_COLUMN = "YYMMDD/HHMM"


@attrs.define(frozen=True)
class SurfaceColumns:
    """
    Ordered column mnemonics of the surface section.
    """

    names: tuple[str, ...] = attrs.field(converter=tuple)

    @classmethod
    def parse(cls, header: str) -> SurfaceColumns:
        """
        Parse the surface header.

        Mnemonics missing from the parameter table are accepted and read as
        plain numbers.

        Raises
        ------
        :class:`.MissingColumnError`
            If the station number or valid time column is absent.
        """
        names = header.split()

        for required in (STATION_COLUMN, TIME_COLUMN):
            if required not in names:
                raise MissingColumnError(required, "surface")

        known = parameter_table().mnemonics(ParameterGroup.SURFACE)
        unknown = [name for name in names if name not in known]
        if unknown:
            logger.debug("Surface header: unknown columns %s", unknown)

        return cls(names)

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> t.Iterator[str]:
        return iter(self.names)


@attrs.define
class SurfaceData:
    """
    A single surface record.
    """

    #: Station number (same as in the station block of soundings).
    station_num: int | None

    #: Valid time (UTC).
    valid_time: datetime

    #: Values of the other columns keyed by mnemonic; ``None`` when missing.
    values: dict[str, float | None] = attrs.field(factory=dict)

    @classmethod
    def parse(cls, tokens: t.Sequence[str], columns: SurfaceColumns) -> SurfaceData:
        """
        Build a record from a row of tokens.

        Raises
        ------
        :class:`.ParseError`
            If there are fewer tokens than columns or if a token cannot be
            interpreted.
        """
        if len(tokens) < len(columns):
            raise ParseError(
                f"not enough tokens for a full row: expected {len(columns)}, "
                f"got {len(tokens)}"
            )

        station_num = None
        valid_time = None
        values = {}

        for name, token in zip(columns, tokens):
            if name == STATION_COLUMN:
                station_num = parse_int(token)
            elif name == TIME_COLUMN:
                valid_time = parse_valid_time(token)
            else:
                values[name] = parse_float(token)

        return cls(station_num=station_num, valid_time=valid_time, values=values)

    def __getitem__(self, mnemonic: str) -> float | None:
        return self.values[mnemonic]

    def get(self, mnemonic: str, default=None) -> float | None:
        value = self.values.get(mnemonic)
        return default if value is None else value

    def quantity(self, mnemonic: str) -> pint.Quantity | None:
        """
        Return a value as a Pint quantity, using the units of the parameter
        table. Returns ``None`` when the value is missing or the column is
        absent.

        Raises
        ------
        KeyError
            If the mnemonic is not part of the surface parameter table.
        """
        parameter = parameter_table().get(mnemonic, ParameterGroup.SURFACE)
        value = self.values.get(mnemonic)
        return None if value is None else parameter.quantity(value)


@attrs.define
class SurfaceSection:
    """
    The surface part of a Bufkit file. Iterating over it yields
    :class:`.SurfaceData` records in file order.
    """

    columns: SurfaceColumns
    tokens: list[str]

    @classmethod
    def parse(cls, text: str) -> SurfaceSection:
        """
        Split the surface header from the records.

        Raises
        ------
        :class:`.ParseError`
            If the section holds no record or its header lacks a required
            column.
        """
        tokens = text.split()

        for i, token in enumerate(tokens):
            if is_number(token):
                break
        else:
            raise ParseError("surface section holds no record")

        columns = SurfaceColumns.parse(" ".join(tokens[:i]))
        return cls(columns=columns, tokens=tokens[i:])

    def rows(self) -> t.Iterator[list[str]]:
        """
        Yield rows of tokens, one per record. The last row may be incomplete.
        """
        return chunks(self.tokens, len(self.columns))

    def __iter__(self) -> t.Iterator[SurfaceData]:
        policy = InvalidPolicy.convert(settings.ON_INVALID)

        for i, row in enumerate(self.rows()):
            if len(row) < len(self.columns):
                # Out of tokens: a trailing partial row ends iteration
                logger.warning(
                    "Surface section: ignoring incomplete trailing row #%d", i
                )
                if policy is InvalidPolicy.RAISE:
                    raise ParseError("incomplete trailing row in surface section")
                return

            try:
                record = SurfaceData.parse(row, self.columns)
            except BufkitError as e:
                if policy is InvalidPolicy.RAISE:
                    raise
                logger.warning("Skipping surface record #%d: %s", i, e)
                continue
            yield record

    def validate(self) -> None:
        """
        Parse every record of the section.

        Raises
        ------
        :class:`.BufkitError`
            On the first record that fails to parse, or if the number of tokens
            is not a multiple of the number of columns.
        """
        if len(self.tokens) % len(self.columns) != 0:
            raise ValidationError(
                f"surface section holds {len(self.tokens)} values, which is not "
                f"a multiple of the {len(self.columns)} columns"
            )

        for row in self.rows():
            SurfaceData.parse(row, self.columns)
