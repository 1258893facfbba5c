from .parameters import ParameterGroup, parameter_table
from .units import symbol

# CF standard names, see
# https://cfconventions.org/Data/cf-standard-names/current/build/cf-standard-name-table.html
# Mnemonics with no matching standard name only get a long name.
STANDARD_NAMES = {
    ParameterGroup.PROFILE: {
        "PRES": "air_pressure",
        "TMPC": "air_temperature",
        "TMWC": "wet_bulb_temperature",
        "DWPC": "dew_point_temperature",
        "THTE": "equivalent_potential_temperature",
        "DRCT": "wind_from_direction",
        "SKNT": "wind_speed",
        "OMEG": "lagrangian_tendency_of_air_pressure",
        "CFRL": "cloud_area_fraction_in_atmosphere_layer",
        "HGHT": "geopotential_height",
    },
    ParameterGroup.INDEX: {
        "SHOW": "atmosphere_stability_showalter_index",
        "LIFT": "atmosphere_stability_lifted_index",
        "KINX": "atmosphere_stability_k_index",
        "TOTL": "atmosphere_stability_total_totals_index",
        "PWAT": "lwe_thickness_of_atmosphere_mass_content_of_water_vapor",
        "CAPE": "atmosphere_convective_available_potential_energy",
        "CINS": "atmosphere_convective_inhibition",
    },
    ParameterGroup.SURFACE: {
        "PMSL": "air_pressure_at_mean_sea_level",
        "PRES": "surface_air_pressure",
        "SKTC": "surface_temperature",
        "LCLD": "low_type_cloud_area_fraction",
        "MCLD": "medium_type_cloud_area_fraction",
        "HCLD": "high_type_cloud_area_fraction",
        "UWND": "eastward_wind",
        "VWND": "northward_wind",
        "T2MS": "air_temperature",
        "TD2M": "dew_point_temperature",
        "Q2MS": "specific_humidity",
        "VSBK": "visibility_in_air",
    },
    ParameterGroup.STATION: {
        "SLAT": "latitude",
        "SLON": "longitude",
        "SELV": "surface_altitude",
    },
}


def attributes(mnemonic: str, group: ParameterGroup | str) -> dict:
    """
    Variable attributes for a mnemonic, see section 3 of the CF conventions
    document
    https://cfconventions.org/Data/cf-conventions/cf-conventions-1.10/cf-conventions.html#_description_of_the_data

    Unknown mnemonics get an empty ``units`` attribute and no names.
    """
    group = ParameterGroup.convert(group)

    try:
        parameter = parameter_table().get(mnemonic, group)
    except KeyError:
        return {"units": ""}

    result = {
        "long_name": parameter.description,
        "units": symbol(parameter.units),
        "bufkit_mnemonic": mnemonic,
        "bufkit_group": group.value,
    }
    standard_name = STANDARD_NAMES.get(group, {}).get(mnemonic)
    if standard_name is not None:
        result["standard_name"] = standard_name

    return result
