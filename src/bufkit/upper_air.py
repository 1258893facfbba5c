"""
Parsing of the upper air section of a Bufkit file.

The upper air section is a sequence of soundings. Each sounding is made of
three blocks separated by blank lines:

* the station block (``STID``, ``STNM``, ``TIME``, ``SLAT``, ``SLON``,
  ``SELV``, ``STIM``);
* the index block (``SHOW``, ``LIFT``, ..., ``BRCH``);
* the profile block: a header of mnemonics followed by one row of values per
  level.
"""

from __future__ import annotations

import logging
import re
import typing as t
import warnings
from datetime import datetime

import attrs
import numpy as np

from ._parse_util import (
    check_missing,
    is_number,
    parse_float,
    parse_int,
    parse_key_values,
    parse_valid_time,
    split_blank_line,
)
from .config import InvalidPolicy, settings
from .exceptions import BufkitError, ParseError, ParseWarning, ValidationError
from .parameters import ParameterGroup, parameter_table

logger = logging.getLogger(__name__)

_STID_RE = re.compile(r"\bSTID\b")


@attrs.define
class StationInfo:
    """
    Information related to the geographic location of the sounding.
    """

    #: Station number, *e.g.* USAF number 727730.
    num: int | None

    #: Valid time of the sounding (UTC).
    valid_time: datetime

    #: Forecast lead time in hours from model initialization.
    lead_time: int | None = None

    #: Station identifier, usually a 3 or 4 letter code.
    id: str | None = None

    #: Latitude [deg].
    lat: float | None = None

    #: Longitude [deg].
    lon: float | None = None

    #: Elevation [m].
    elevation: float | None = None

    @classmethod
    def parse(cls, text: str) -> StationInfo:
        """
        Parse the station block of a sounding.

        Raises
        ------
        :class:`.ParseError`
            If ``STNM`` or ``TIME`` is absent or cannot be interpreted.
        """
        kv = parse_key_values(text)

        for key in ("STNM", "TIME"):
            if key not in kv or not kv[key]:
                raise ParseError(f"station block has no '{key}' value")

        def optional(key, parse):
            value = kv.get(key, "")
            return parse(value) if value else None

        return cls(
            num=parse_int(kv["STNM"]),
            valid_time=parse_valid_time(kv["TIME"]),
            lead_time=optional("STIM", parse_int),
            id=kv.get("STID") or None,
            lat=optional("SLAT", parse_float),
            lon=optional("SLON", parse_float),
            elevation=optional("SELV", parse_float),
        )


@attrs.define
class Indexes:
    """
    Stability and moisture indices attached to a sounding. Values are stored as
    plain floats in the units listed in the parameter table; ``None`` denotes
    a missing value.
    """

    values: dict[str, float | None] = attrs.field(factory=dict)

    @classmethod
    def parse(cls, text: str) -> Indexes:
        """
        Parse the index block of a sounding. Keys may appear in any order;
        absent keys are treated as missing. Unknown keys are ignored with a
        :class:`.ParseWarning`.
        """
        kv = parse_key_values(text)
        known = parameter_table().mnemonics(ParameterGroup.INDEX)
        values = {}

        unknown = [key for key in kv if key not in known]
        if unknown:
            warnings.warn(f"ignoring unknown index keys {unknown}", ParseWarning)

        for mnemonic in known:
            token = kv.get(mnemonic, "")
            values[mnemonic] = parse_float(token) if token else None

        return cls(values)

    def __getitem__(self, mnemonic: str) -> float | None:
        return self.values[mnemonic]

    def quantities(self) -> dict:
        """
        Return present values as Pint quantities, keyed by mnemonic.
        """
        table = parameter_table()
        return {
            mnemonic: table.get(mnemonic, "index").quantity(value)
            for mnemonic, value in self.values.items()
            if value is not None
        }


@attrs.define
class Profile:
    """
    Values vs. pressure level. Each column is a float array holding NaN where
    the file reports missing data.
    """

    columns: dict[str, np.ndarray] = attrs.field(factory=dict)

    @property
    def n_levels(self) -> int:
        return len(self.columns["PRES"]) if "PRES" in self.columns else 0

    @staticmethod
    def split_header_and_values(text: str) -> tuple[list[str], list[str]]:
        """
        Split the profile block into header mnemonics and value tokens.
        """
        tokens = text.split()
        for i, token in enumerate(tokens):
            if is_number(token):
                return tokens[:i], tokens[i:]

        raise ParseError("profile block holds no values")

    @classmethod
    def parse(cls, text: str) -> Profile:
        """
        Parse the profile block of a sounding.

        Raises
        ------
        :class:`.ParseError`
            If the header contains an unknown or duplicate mnemonic, if
            ``PRES`` is absent, or if the number of values is not a multiple of
            the number of columns.
        """
        header, values = cls.split_header_and_values(text)
        known = parameter_table().mnemonics(ParameterGroup.PROFILE)

        for name in header:
            if name not in known:
                raise ParseError(f"unknown profile column '{name}'")
        if len(set(header)) != len(header):
            raise ParseError(f"duplicate profile column in header {header}")
        if "PRES" not in header:
            raise ParseError("profile header has no 'PRES' column")

        ncols = len(header)
        if len(values) % ncols != 0:
            raise ParseError(
                f"profile holds {len(values)} values, which is not a multiple "
                f"of the {ncols} columns"
            )

        try:
            array = np.array(values, dtype=float).reshape(-1, ncols)
        except ValueError as e:
            raise ParseError(f"non-numeric value in profile: {e}") from e

        return cls({name: check_missing(array[:, i]) for i, name in enumerate(header)})

    def __getitem__(self, mnemonic: str) -> np.ndarray:
        return self.columns[mnemonic]

    def get(self, mnemonic: str) -> np.ndarray:
        """
        Return a column, or an all-NaN array if the file does not provide it.
        """
        if mnemonic in self.columns:
            return self.columns[mnemonic]
        return np.full(self.n_levels, np.nan)


@attrs.define
class UpperAir:
    """
    All the values of a parsed sounding.
    """

    station: StationInfo
    indexes: Indexes
    profile: Profile

    @property
    def valid_time(self) -> datetime:
        return self.station.valid_time

    @classmethod
    def parse(cls, text: str) -> UpperAir:
        """
        Parse the text of a single sounding.

        Raises
        ------
        :class:`.ParseError`
            If the blocks cannot be isolated or parsed.
        """
        split = split_blank_line(text)
        if split is None:
            raise ParseError("cannot isolate the station block of a sounding")
        station_text, rest = split

        split = split_blank_line(rest)
        if split is None:
            raise ParseError("cannot isolate the index block of a sounding")
        index_text, profile_text = split

        return cls(
            station=StationInfo.parse(station_text),
            indexes=Indexes.parse(index_text),
            profile=Profile.parse(profile_text),
        )

    def validate(self) -> None:
        """
        Check the sounding for consistency.

        Raises
        ------
        :class:`.ValidationError`
            If the profile has no level.
        """
        if self.profile.n_levels == 0:
            raise ValidationError(
                f"sounding valid at {self.valid_time} has an empty profile"
            )


@attrs.define
class UpperAirSection:
    """
    The upper air part of a Bufkit file. Iterating over it yields
    :class:`.UpperAir` instances in file order.
    """

    raw_text: str

    def header(self) -> dict[str, list[str]]:
        """
        Return the declarations found before the first sounding
        (``SNPARM``, ``STNPRM``) as lists of mnemonics.
        """
        match = _STID_RE.search(self.raw_text)
        preamble = self.raw_text if match is None else self.raw_text[: match.start()]
        kv = parse_key_values(preamble)
        return {key: [x for x in value.split(";") if x] for key, value in kv.items()}

    def chunks(self) -> list[str]:
        """
        Split the section text into one chunk per sounding.
        """
        starts = [m.start() for m in _STID_RE.finditer(self.raw_text)]
        ends = starts[1:] + [len(self.raw_text)]
        logger.debug("Upper air section: found %d soundings", len(starts))
        return [self.raw_text[start:end] for start, end in zip(starts, ends)]

    def __iter__(self) -> t.Iterator[UpperAir]:
        policy = InvalidPolicy.convert(settings.ON_INVALID)

        for i, chunk in enumerate(self.chunks()):
            try:
                upper_air = UpperAir.parse(chunk)
            except BufkitError as e:
                if policy is InvalidPolicy.RAISE:
                    raise
                logger.warning("Skipping sounding #%d: %s", i, e)
                continue
            yield upper_air

    def validate(self) -> None:
        """
        Parse and check every sounding of the section.

        Raises
        ------
        :class:`.BufkitError`
            On the first sounding that fails to parse or validate.
        """
        chunks = self.chunks()
        if not chunks:
            raise ValidationError("upper air section holds no sounding")

        for chunk in chunks:
            UpperAir.parse(chunk).validate()
