import pytest

from fo4_planner.catalog.perk_catalog import PerkCatalog

from perk_factory import make_catalog


@pytest.fixture(scope="session")
def bundled_catalog():
    """The real dataset shipped with the package, loaded once."""
    return PerkCatalog.load()


@pytest.fixture
def synthetic_catalog():
    return make_catalog()
