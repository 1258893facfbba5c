"""
Loading, validation and iteration over whole Bufkit files.

A Bufkit file holds an upper air section (one sounding per forecast hour)
followed by a surface section starting at the ``STN YYMMDD/HHMM`` header.
:class:`BufkitFile` keeps the raw text in memory; :class:`BufkitData` splits
it into sections and pairs upper air and surface records valid at the same
time into :class:`.Sounding` objects.
"""

from __future__ import annotations

__all__ = ["BufkitData", "BufkitFile", "SURFACE_SECTION_MARKER"]

import logging
import typing as t
from pathlib import Path

import attrs
import xarray as xr

from ._parse_util import parse_key_values, split_blank_line
from .exceptions import ParseError, ValidationError
from .sounding import Sounding, combine
from .surface import SurfaceSection
from .typing import PathLike
from .upper_air import Profile, UpperAirSection

logger = logging.getLogger(__name__)

#: Text that marks the beginning of the surface section.
SURFACE_SECTION_MARKER = "STN YYMMDD/HHMM"


@attrs.define
class BufkitData:
    """
    The sections of a Bufkit file. Iterating over it yields
    :class:`.Sounding` objects ordered by valid time.

    Upper air and surface records are matched on their valid time; records
    without a counterpart in the other section are skipped.
    """

    upper_air: UpperAirSection
    surface: SurfaceSection
    file_name: str = "Unknown File"

    @classmethod
    def from_text(cls, text: str, file_name: str = "Unknown File") -> BufkitData:
        """
        Split the text of a Bufkit file into its sections.

        Raises
        ------
        :class:`.ParseError`
            If the surface section marker cannot be found or the surface
            header is invalid.
        """
        break_point = text.find(SURFACE_SECTION_MARKER)
        if break_point < 0:
            raise ParseError(
                f"unable to find break between upper air and surface data in "
                f"'{file_name}'"
            )

        logger.debug(
            "'%s': surface section starts at offset %d", file_name, break_point
        )
        return cls(
            upper_air=UpperAirSection(text[:break_point]),
            surface=SurfaceSection.parse(text[break_point:]),
            file_name=file_name,
        )

    def __iter__(self) -> t.Iterator[Sounding]:
        upper_air_it = iter(self.upper_air)
        surface_it = iter(self.surface)

        next_ua = next(upper_air_it, None)
        next_sd = next(surface_it, None)

        while next_ua is not None and next_sd is not None:
            if next_sd.valid_time < next_ua.valid_time:
                next_sd = next(surface_it, None)
            elif next_ua.valid_time < next_sd.valid_time:
                next_ua = next(upper_air_it, None)
            else:
                yield combine(next_ua, next_sd, self.file_name)
                next_ua = next(upper_air_it, None)
                next_sd = next(surface_it, None)

    def soundings(self) -> list[Sounding]:
        """
        Return all soundings as a list.
        """
        return list(self)

    def validate(self) -> None:
        """
        Validate the whole file: every record must parse, and the header
        declarations (``SNPARM``, ``STNPRM``), when present, must agree with
        the soundings.

        Raises
        ------
        :class:`.BufkitError`
            If a check fails.
        """
        self.upper_air.validate()
        self.surface.validate()
        self._validate_declarations()

    def _validate_declarations(self) -> None:
        header = self.upper_air.header()
        snparm = header.get("SNPARM")
        stnprm = header.get("STNPRM")

        if snparm is None and stnprm is None:
            return

        for chunk in self.upper_air.chunks():
            _, rest = split_blank_line(chunk)
            index_text, profile_text = split_blank_line(rest)

            if snparm is not None:
                columns, _ = Profile.split_header_and_values(profile_text)
                if columns != snparm:
                    raise ValidationError(
                        f"profile columns {columns} do not match SNPARM "
                        f"declaration {snparm}"
                    )

            if stnprm is not None:
                keys = list(parse_key_values(index_text).keys())
                if keys != stnprm:
                    raise ValidationError(
                        f"index keys {keys} do not match STNPRM declaration {stnprm}"
                    )

    def to_dataset(self) -> xr.Dataset:
        """
        Convert all soundings to a single dataset with a ``time`` dimension.
        Profiles with fewer levels than the deepest one are padded with NaN.

        Raises
        ------
        :class:`.ValidationError`
            If the file yields no sounding.
        """
        datasets = [sounding.to_dataset() for sounding in self]
        if not datasets:
            raise ValidationError(f"'{self.file_name}' yields no sounding")

        result = xr.concat(
            datasets,
            dim="time",
            join="outer",
            data_vars="all",
            coords="different",
            compat="equals",
            combine_attrs="drop_conflicts",
        )
        result.attrs["source"] = self.file_name
        return result


@attrs.define
class BufkitFile:
    """
    An entire Bufkit file held in memory.
    """

    raw_text: str
    file_name: str = "Unknown File"

    @classmethod
    def load(cls, path: PathLike) -> BufkitFile:
        """
        Load a file into memory.

        Raises
        ------
        OSError
            If the file cannot be read.
        """
        path = Path(path)
        with open(path, "r") as f:
            contents = f.read()

        logger.debug("Loaded '%s' (%d characters)", path, len(contents))
        return cls(raw_text=contents, file_name=path.name or "Unknown File")

    @classmethod
    def from_text(cls, text: str, file_name: str = "Unknown File") -> BufkitFile:
        """
        Wrap text already held in memory.
        """
        return cls(raw_text=text, file_name=file_name)

    def data(self) -> BufkitData:
        """
        Split the file into its sections.
        """
        return BufkitData.from_text(self.raw_text, self.file_name)

    def validate_file_format(self) -> None:
        """
        Validate the whole file, ensure it is parseable and do some sanity
        checks.

        Raises
        ------
        :class:`.BufkitError`
            If the file is invalid.
        """
        self.data().validate()

    def __iter__(self) -> t.Iterator[Sounding]:
        return iter(self.data())
