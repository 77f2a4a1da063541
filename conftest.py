import pytest

from dates import SECONDS_PER_DAY, date_from_fields
from library import Library


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    # CLI tests may switch the output mode through os.environ; restore it after each test
    monkeypatch.setenv("LIB_CLI_OUTPUT", "plain")


@pytest.fixture
def t0():
    """Local midnight on 10/01/2024."""
    return date_from_fields(10, 1, 2024)


@pytest.fixture
def day():
    return SECONDS_PER_DAY


@pytest.fixture
def lib(t0):
    lib = Library()
    lib.add_book("Dune", "Frank Herbert", 1965, t0)
    lib.add_book("Neuromancer", "William Gibson", 1984, t0)
    lib.add_book("Foundation", "Isaac Asimov", 1951, t0)
    return lib


@pytest.fixture
def data_file(tmp_path):
    # One catalog file per test
    return str(tmp_path / "database.txt")
