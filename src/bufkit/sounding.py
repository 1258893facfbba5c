"""
Sounding data model combining the upper air and surface records of a Bufkit
file valid at the same time.
"""

from __future__ import annotations

__all__ = ["Sounding", "combine"]

from datetime import datetime

import attrs
import numpy as np
import pint
import xarray as xr

from . import cfconventions
from .parameters import ParameterGroup, parameter_table
from .surface import SurfaceData
from .upper_air import StationInfo, UpperAir

# Keys of the analysis mapping, paired with the source mnemonic
_INDEX_ANALYSIS_KEYS = {
    "Showalter": "SHOW",
    "LI": "LIFT",
    "SWeT": "SWET",
    "K": "KINX",
    "LCL": "LCLP",
    "PWAT": "PWAT",
    "TotalTotals": "TOTL",
    "CAPE": "CAPE",
    "LCLTemperature": "LCLT",
    "CIN": "CINS",
    "EquilibriumLevel": "EQLV",
    "LFC": "LFCT",
    "BulkRichardsonNumber": "BRCH",
}

_SURFACE_ANALYSIS_KEYS = {
    "SkinTemperature": "SKTC",
    "Layer1SoilTemp": "STC1",
    "SnowFall1HourKgPerMeterSquared": "SNFL",
    "Precipitation1HrMm": "P01M",
    "ConvectivePrecip1HrMm": "C01M",
    "Layer2SoilTemp": "STC2",
    "SnowRatio": "SNRA",
    "VisibilityKm": "VSBK",
    "StormRelativeHelicity": "HLCY",
    "WxSymbolCode": "WSYM",
}

_PRECIP_TYPE_KEYS = {
    "PrecipTypeSnow": "WXTS",
    "PrecipTypeRain": "WXTR",
    "PrecipTypeFreezingRain": "WXTZ",
    "PrecipTypeIcePellets": "WXTP",
}


@attrs.define
class Sounding:
    """
    A forecast sounding: a vertical profile, its stability indices and the
    surface conditions valid at the same time.

    Profiles are stored as Pint quantity arrays holding NaN for missing levels;
    indices and surface values are stored as plain floats (``None`` when
    missing) and exposed as quantities by accessor methods.
    """

    #: Station description.
    station: StationInfo

    #: Valid time (UTC).
    valid_time: datetime

    #: Profile columns keyed by mnemonic, as quantity arrays.
    profile: dict[str, pint.Quantity] = attrs.field(factory=dict)

    #: Index values keyed by mnemonic.
    indexes: dict[str, float | None] = attrs.field(factory=dict)

    #: Surface values keyed by mnemonic.
    surface: dict[str, float | None] = attrs.field(factory=dict)

    #: Forecast lead time [h].
    lead_time: int | None = None

    #: Where the data comes from, usually a file name.
    source_description: str | None = None

    # -- Profiles --------------------------------------------------------------

    @property
    def n_levels(self) -> int:
        return len(self.profile["PRES"]) if "PRES" in self.profile else 0

    def profile_quantity(self, mnemonic: str) -> pint.Quantity:
        """
        Return a profile column. Columns absent from the file are returned as
        all-NaN arrays with the units of the parameter table.
        """
        if mnemonic in self.profile:
            return self.profile[mnemonic]
        parameter = parameter_table().get(mnemonic, ParameterGroup.PROFILE)
        return parameter.quantity(np.full(self.n_levels, np.nan))

    @property
    def pressure(self) -> pint.Quantity:
        return self.profile_quantity("PRES")

    @property
    def temperature(self) -> pint.Quantity:
        return self.profile_quantity("TMPC")

    @property
    def wet_bulb(self) -> pint.Quantity:
        return self.profile_quantity("TMWC")

    @property
    def dew_point(self) -> pint.Quantity:
        return self.profile_quantity("DWPC")

    @property
    def theta_e(self) -> pint.Quantity:
        return self.profile_quantity("THTE")

    @property
    def wind_direction(self) -> pint.Quantity:
        return self.profile_quantity("DRCT")

    @property
    def wind_speed(self) -> pint.Quantity:
        return self.profile_quantity("SKNT")

    @property
    def pvv(self) -> pint.Quantity:
        """Pressure vertical velocity."""
        return self.profile_quantity("OMEG")

    @property
    def height(self) -> pint.Quantity:
        return self.profile_quantity("HGHT")

    @property
    def cloud_fraction(self) -> pint.Quantity:
        return self.profile_quantity("CFRL")

    # -- Indexes and surface ---------------------------------------------------

    def index(self, mnemonic: str) -> pint.Quantity | None:
        """
        Return an index as a quantity, or ``None`` if it is missing.
        """
        value = self.indexes.get(mnemonic)
        if value is None:
            return None
        return parameter_table().get(mnemonic, ParameterGroup.INDEX).quantity(value)

    def surface_value(self, mnemonic: str) -> pint.Quantity | None:
        """
        Return a surface value as a quantity, or ``None`` if it is missing.
        """
        value = self.surface.get(mnemonic)
        if value is None:
            return None
        return parameter_table().get(mnemonic, ParameterGroup.SURFACE).quantity(value)

    @property
    def mslp(self) -> pint.Quantity | None:
        return self.surface_value("PMSL")

    @property
    def station_pressure(self) -> pint.Quantity | None:
        return self.surface_value("PRES")

    @property
    def sfc_temperature(self) -> pint.Quantity | None:
        return self.surface_value("T2MS")

    @property
    def sfc_dew_point(self) -> pint.Quantity | None:
        return self.surface_value("TD2M")

    @property
    def low_cloud(self) -> pint.Quantity | None:
        return self.surface_value("LCLD")

    @property
    def mid_cloud(self) -> pint.Quantity | None:
        return self.surface_value("MCLD")

    @property
    def high_cloud(self) -> pint.Quantity | None:
        return self.surface_value("HCLD")

    @property
    def sfc_wind(self) -> tuple[pint.Quantity, pint.Quantity] | None:
        """10-meter wind as a (u, v) pair, or ``None`` if incomplete."""
        u, v = self.surface_value("UWND"), self.surface_value("VWND")
        if u is None or v is None:
            return None
        return u, v

    def analysis(self) -> dict[str, float]:
        """
        Collect the values that have no dedicated field in a flat mapping of
        descriptive keys to plain floats. Missing values are left out.
        Precipitation type flags are reported as 1.0 or 0.0.
        """
        result = {}

        for key, mnemonic in _INDEX_ANALYSIS_KEYS.items():
            value = self.indexes.get(mnemonic)
            if value is not None:
                result[key] = value

        for key, mnemonic in _SURFACE_ANALYSIS_KEYS.items():
            value = self.surface.get(mnemonic)
            if value is not None:
                result[key] = value

        for key, mnemonic in _PRECIP_TYPE_KEYS.items():
            value = self.surface.get(mnemonic)
            if value is not None:
                result[key] = 1.0 if value > 0.5 else 0.0

        u, v = self.surface.get("USTM"), self.surface.get("VSTM")
        if u is not None and v is not None:
            result["StormMotionUMps"] = u
            result["StormMotionVMps"] = v

        return result

    # -- Conversion ------------------------------------------------------------

    def to_dataset(self) -> xr.Dataset:
        """
        Convert the sounding to an xarray dataset.

        Profile columns become data variables along the ``level`` dimension
        and are named after their mnemonic; indices are scalar variables named
        after their mnemonic; surface values are scalar variables prefixed with
        ``sfc_``. Variable attributes follow the CF conventions where a
        standard name exists.
        """
        data_vars = {}

        for mnemonic, quantity in self.profile.items():
            data_vars[mnemonic] = (
                "level",
                np.asarray(quantity.magnitude, dtype=float),
                cfconventions.attributes(mnemonic, ParameterGroup.PROFILE),
            )

        for mnemonic, value in self.indexes.items():
            data_vars[mnemonic] = (
                (),
                np.nan if value is None else value,
                cfconventions.attributes(mnemonic, ParameterGroup.INDEX),
            )

        for mnemonic, value in self.surface.items():
            data_vars[f"sfc_{mnemonic}"] = (
                (),
                np.nan if value is None else value,
                cfconventions.attributes(mnemonic, ParameterGroup.SURFACE),
            )

        data_vars["lead_time"] = (
            (),
            np.nan if self.lead_time is None else float(self.lead_time),
            {"long_name": "forecast lead time", "units": "h"},
        )

        attrs_ = {
            "station_id": self.station.id or "",
            "station_num": -1 if self.station.num is None else self.station.num,
            "source": self.source_description or "",
        }
        for name, value in [
            ("latitude", self.station.lat),
            ("longitude", self.station.lon),
            ("elevation", self.station.elevation),
        ]:
            if value is not None:
                attrs_[name] = value

        return xr.Dataset(
            data_vars,
            coords={
                "level": ("level", np.arange(self.n_levels)),
                "time": ((), np.datetime64(self.valid_time, "ns")),
            },
            attrs=attrs_,
        )


def combine(
    upper_air: UpperAir, surface: SurfaceData, source_description: str | None = None
) -> Sounding:
    """
    Merge an upper air record and the surface record valid at the same time
    into a :class:`.Sounding`.
    """
    table = parameter_table()
    profile = {
        mnemonic: table.get(mnemonic, ParameterGroup.PROFILE).quantity(values)
        for mnemonic, values in upper_air.profile.columns.items()
    }

    return Sounding(
        station=upper_air.station,
        valid_time=upper_air.valid_time,
        lead_time=upper_air.station.lead_time,
        profile=profile,
        indexes=dict(upper_air.indexes.values),
        surface=dict(surface.values),
        source_description=source_description,
    )
