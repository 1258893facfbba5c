import warnings
from datetime import datetime

import numpy as np
import pytest

from bufkit.exceptions import ParseError, ValidationError
from bufkit.file import SURFACE_SECTION_MARKER, BufkitData, BufkitFile


def test_bufkit_file_load(kmso_path):
    f = BufkitFile.load(kmso_path)
    assert f.file_name == "kmso.buf"
    assert f.raw_text.startswith("SNPARM")

    with pytest.raises(OSError):
        BufkitFile.load(kmso_path.parent / "does_not_exist.buf")


def test_bufkit_file_from_text(kmso_text):
    f = BufkitFile.from_text(kmso_text, "kmso.buf")
    assert len(f.data().soundings()) == 3
    assert BufkitFile.from_text(kmso_text).file_name == "Unknown File"


def test_bufkit_file_iter(kmso_path):
    soundings = list(BufkitFile.load(kmso_path))

    # The surface record at 03:00 has no upper air counterpart
    assert [s.valid_time for s in soundings] == [
        datetime(2017, 4, 1, 0, 0),
        datetime(2017, 4, 1, 1, 0),
        datetime(2017, 4, 1, 2, 0),
    ]
    assert all(s.source_description == "kmso.buf" for s in soundings)


def test_bufkit_data_unmatched(kmso_text):
    # Move the first surface record before any sounding: both the first
    # surface record and the first sounding lose their counterpart
    text = kmso_text.replace("727730 170401/0000", "727730 170331/2300")
    soundings = BufkitData.from_text(text).soundings()
    assert [s.station.lead_time for s in soundings] == [1, 2]


def test_bufkit_data_no_marker(kmso_text):
    text = kmso_text[: kmso_text.find(SURFACE_SECTION_MARKER)]

    with pytest.raises(ParseError):
        BufkitData.from_text(text, "kmso.buf")


def test_bufkit_file_validate(kmso_path, truncated_path):
    BufkitFile.load(kmso_path).validate_file_format()

    with pytest.raises(ValidationError):
        BufkitFile.load(truncated_path).validate_file_format()

    # Truncated files can still be read
    assert len(list(BufkitFile.load(truncated_path))) == 3


@pytest.mark.parametrize(
    "old, new",
    [
        ("SNPARM = PRES;TMPC;TMWC", "SNPARM = PRES;TMWC;TMPC"),
        ("STNPRM = SHOW;LIFT", "STNPRM = LIFT;SHOW"),
    ],
    ids=["snparm", "stnprm"],
)
def test_bufkit_data_validate_declarations(kmso_text, old, new):
    data = BufkitData.from_text(kmso_text.replace(old, new))

    with pytest.raises(ValidationError):
        data.validate()


def test_bufkit_data_validate_invalid_sounding(kmso_text):
    data = BufkitData.from_text(kmso_text.replace("STIM = 1", "STIM = abc"))

    with pytest.raises(ParseError):
        data.validate()


def test_bufkit_data_to_dataset(kmso_path):
    # Concatenation must not rely on xarray defaults scheduled to change
    with warnings.catch_warnings():
        warnings.simplefilter("error", FutureWarning)
        ds = BufkitFile.load(kmso_path).data().to_dataset()

    assert ds.sizes["time"] == 3
    assert ds.sizes["level"] == 4
    assert ds.attrs["source"] == "kmso.buf"
    assert ds.attrs["station_num"] == 727730

    # The last sounding has one level less and is padded with NaN
    assert np.isnan(ds["PRES"].values[2, 3])
    np.testing.assert_allclose(ds["PRES"].values[2, :3], [905.7, 900.5, 850.0])

    np.testing.assert_allclose(ds["CAPE"].values, [0.0, 12.4, 25.0])
    np.testing.assert_allclose(ds["lead_time"].values, [0.0, 1.0, 2.0])
    assert np.isnan(ds["EQLV"].values[0])
    np.testing.assert_allclose(ds["sfc_PMSL"].values, [1020.5, 1019.8, 1019.1])


def test_bufkit_data_to_dataset_empty(kmso_text):
    # Shift all surface records by one day: nothing matches
    text = kmso_text.replace("727730 170401/", "727730 170402/")

    with pytest.raises(ValidationError):
        BufkitData.from_text(text).to_dataset()
