from pathlib import Path

import pytest

from bufkit.config import InvalidPolicy, settings

DATA_DIR = Path(__file__).parent / "data"


# ------------------------------------------------------------------------------
#                               Test data fixtures
# ------------------------------------------------------------------------------


@pytest.fixture(scope="session")
def data_dir():
    return DATA_DIR


@pytest.fixture(scope="session")
def kmso_path():
    """A valid file holding 3 soundings and 4 surface records."""
    return DATA_DIR / "kmso.buf"


@pytest.fixture(scope="session")
def truncated_path():
    """Same as ``kmso.buf``, with the last surface record cut short."""
    return DATA_DIR / "truncated.buf"


@pytest.fixture(scope="session")
def kmso_text(kmso_path):
    return kmso_path.read_text()


# ------------------------------------------------------------------------------
#                              Settings fixtures
# ------------------------------------------------------------------------------


@pytest.fixture
def on_invalid_raise():
    """Switch record iterators to the 'raise' policy for the test's duration."""
    settings.set("ON_INVALID", InvalidPolicy.RAISE)
    yield
    settings.set("ON_INVALID", InvalidPolicy.SKIP)
