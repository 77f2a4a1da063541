import json

import pytest
from typer.testing import CliRunner

from database import load_file
from main import app

runner = CliRunner()


@pytest.fixture
def cli(data_file):
    """Invoke the CLI against the per-test catalog file."""
    def invoke(*args):
        return runner.invoke(app, ["--file", data_file, *args])
    invoke("init")
    return invoke


@pytest.fixture
def stocked(cli):
    cli("add", "Dune", "Frank Herbert", "1965", "--date", "01/01/2024")
    cli("add", "Neuromancer", "William Gibson", "1984", "--date", "01/01/2024")
    cli("add", "Foundation", "Isaac Asimov", "1951", "--date", "01/01/2024")
    return cli


def test_missing_catalog(data_file):
    result = runner.invoke(app, ["--file", data_file, "list"])
    assert result.exit_code == 1
    assert "cannot be found" in result.output


def test_init_is_idempotent(cli):
    result = cli("init")
    assert result.exit_code == 0
    assert "already exists" in result.output


def test_list_no_books(cli):
    result = cli("list")
    assert result.exit_code == 0
    assert "No books in library." in result.output


def test_add_book_success(cli, data_file):
    result = cli("add", "Dune", "Frank Herbert", "1965", "--date", "10/01/2024")
    assert result.exit_code == 0
    assert "Successfully added: Book 1: Dune by Frank Herbert" in result.output

    book = load_file(data_file).find_by_position(0)
    assert (book.title, book.author, book.pub_year) == ("Dune", "Frank Herbert", 1965)

    result = cli("list")
    assert "Book 1: Dune, Frank Herbert, 1965 (AVAILABLE)" in result.output


@pytest.mark.parametrize("args", [
    ("x" * 51, "Author", "2000"),
    ("Title", "", "2000"),
    ("Title", "Author", "0"),
    ("Title", "Author", "99999"),
])
def test_add_rejects_invalid_input(cli, data_file, args):
    result = cli("add", *args)
    assert result.exit_code == 1
    assert "Error" in result.output
    assert len(load_file(data_file)) == 0


def test_add_rejects_bad_date(cli):
    result = cli("add", "Dune", "Herbert", "1965", "--date", "31/02/2024")
    assert result.exit_code == 1
    assert "not a real calendar date" in result.output


def test_remove_renumbers(stocked):
    result = stocked("remove", "1")
    assert result.exit_code == 0
    assert "Book 1 (Dune) has been removed." in result.output

    listing = stocked("list").output
    assert "Book 1: Neuromancer" in listing
    assert "Book 2: Foundation" in listing
    assert "Dune" not in listing


def test_remove_out_of_range(stocked):
    result = stocked("remove", "4")
    assert result.exit_code == 1
    assert "Book 4 does not exist" in result.output


def test_edit(stocked, data_file):
    result = stocked("edit", "2", "--title", "Count Zero", "--year", "1986")
    assert result.exit_code == 0
    book = load_file(data_file).find_by_position(1)
    assert (book.title, book.author, book.pub_year) == ("Count Zero", "William Gibson", 1986)


def test_edit_needs_a_field(stocked):
    result = stocked("edit", "1")
    assert result.exit_code == 1
    assert "Nothing to update" in result.output


def test_search_by_title(stocked):
    result = stocked("search", "title", "NEURO")
    assert result.exit_code == 0
    assert "Book 2: Neuromancer" in result.output
    assert "Dune" not in result.output


def test_search_by_year(stocked):
    result = stocked("search", "year", "1951")
    assert "Book 3: Foundation" in result.output


def test_search_no_match(stocked):
    result = stocked("search", "author", "Tolkien")
    assert "No books matching 'Tolkien'." in result.output


def test_borrow_then_overdue(stocked):
    result = stocked("borrow", "1", "Alice", "--date", "10/01/2024")
    assert result.exit_code == 0
    assert "due 17/01/2024" in result.output

    assert "No overdue books." in stocked("overdue", "--date", "17/01/2024").output
    result = stocked("overdue", "--date", "18/01/2024")
    assert "1. Dune, Alice, 1 days overdue" in result.output


def test_borrow_twice(stocked):
    stocked("borrow", "1", "Alice", "--date", "10/01/2024")
    result = stocked("borrow", "1", "Bob", "--date", "11/01/2024")
    assert result.exit_code == 1
    assert "This book is already out" in result.output


def test_return(stocked, data_file):
    stocked("borrow", "2", "Alice", "--date", "10/01/2024")
    result = stocked("return", "2")
    assert result.exit_code == 0
    assert "Book successfully returned" in result.output
    assert load_file(data_file).find_by_position(1).loan is None


def test_return_when_not_out(stocked):
    result = stocked("return", "2")
    assert result.exit_code == 1
    assert "This book is not currently out" in result.output


def test_json_list(stocked):
    result = stocked("--output", "json", "list")
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert [b["title"] for b in payload] == ["Dune", "Neuromancer", "Foundation"]
    assert payload[0]["date_added"] == "01/01/2024"
    assert payload[0]["status"] == "Available"


def test_stats(stocked):
    stocked("borrow", "1", "Alice", "--date", "10/01/2024")
    result = stocked("stats", "--date", "20/01/2024")
    assert result.exit_code == 0
    assert "Total Books: 3" in result.output
    assert "On Loan: 1" in result.output
    assert "Overdue: 1" in result.output


def test_list_survives_unrenderable_date(cli, data_file):
    with open(data_file, "a", encoding="utf-8") as f:
        f.write("0,Dune,Herbert,1965,99999999999999999,0,0,0\n")

    result = cli("--output", "json", "list")

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload[0]["title"] == "Dune"
    assert payload[0]["date_added"] == "?"


def test_pub_year_is_checked_against_the_given_date(cli, data_file):
    result = cli("add", "Dune", "Herbert", "2024", "--date", "10/01/2024")
    assert result.exit_code == 1
    assert len(load_file(data_file)) == 0

    result = cli("add", "Dune", "Herbert", "2023", "--date", "10/01/2024")
    assert result.exit_code == 0


def test_edit_year_is_checked_against_the_given_date(stocked):
    result = stocked("edit", "1", "--year", "2024", "--date", "10/01/2024")
    assert result.exit_code == 1
    assert "publication year" in result.output
