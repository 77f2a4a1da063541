import logging
import sys
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.markup import escape
from rich import box

import typer

import database
from config import settings
from dates import instant_to_text, is_plausible_text, text_to_instant, today, year_of
from errors import (
    AlreadyOnLoanError,
    FormatError,
    LibraryError,
    NotFoundError,
    NotOnLoanError,
)
from lending import borrow_book, overdue_report, return_book
from library import EditableField, Library, SearchField
from utils.ui_helpers import (
    print_list_result,
    print_overdue_result,
    print_search_result,
    print_stats_result,
    set_output_mode,
)
from utils.validators import DateFieldValidator, TextValidator, YearValidator

APP_NAME = settings.app_name

logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

console = Console()

# Options shared by every command, filled in by the callback
_state = {"file": None}


def _data_file() -> str:
    return _state["file"] or database.DATABASE_FILE


def _fail(message: str) -> None:
    print(message)
    raise typer.Exit(code=1)


def _load() -> Library:
    path = _data_file()
    logger.debug(f"Using catalog file {path}")
    try:
        return database.load_file(path)
    except NotFoundError:
        _fail(f"Database file \"{path}\" cannot be found. Run 'init' to create it.")
    except LibraryError as e:
        _fail(f"Could not read \"{path}\": {e}")


def _save(lib: Library) -> None:
    try:
        database.save_file(_data_file(), lib)
    except LibraryError as e:
        _fail(f"Error: {e}")


def _resolve_date(text: Optional[str]) -> int:
    if not text:
        return today()
    try:
        return text_to_instant(text)
    except FormatError as e:
        _fail(f"Error: {e}")


def _position(lib: Library, number: int) -> int:
    """Convert a 1-based book number from the operator into a catalog position."""
    if not 1 <= number <= len(lib):
        _fail(f"Book {number} does not exist (catalog holds {len(lib)} books).")
    return number - 1


# --- Typer CLI application ---
app = typer.Typer(help=APP_NAME)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    file: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Catalog file (default: LIBRARY_DB_FILE / LIBRARY_DATA_FILE / database.txt)",
    ),
):
    """Global options for the CLI (output mode, data file)."""
    if output:
        set_output_mode(output)
    _state["file"] = file


@app.command("init")
def cli_init():
    """Create an empty catalog file if there is none."""
    path = _data_file()
    try:
        created = database.initialize_database(path)
    except LibraryError as e:
        _fail(f"Error: {e}")
    if created:
        print(f"Created empty catalog at {path}")
    else:
        print(f"Catalog {path} already exists.")


@app.command("list")
def cli_list():
    """List every book in catalog order."""
    print_list_result(_load().list_books())


@app.command("add")
def cli_add(
    title: str,
    author: str,
    pub_year: int,
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Date added, DD/MM/YYYY (default: today)"),
):
    """Add a book; it starts out available."""
    title, author = title.strip(), author.strip()
    if not TextValidator.validate_title(title):
        _fail(f"Error: title must be 1-{settings.max_field_length} characters.")
    if not TextValidator.validate_author(author):
        _fail(f"Error: author must be 1-{settings.max_field_length} characters.")
    date_added = _resolve_date(date)
    if not YearValidator.validate_pub_year(pub_year, year_of(date_added)):
        _fail("Error: publication year must be after 0 AD and before the current year.")

    lib = _load()
    index = lib.add_book(title, author, pub_year, date_added)
    _save(lib)
    print(f"Successfully added: Book {index + 1}: {title} by {author}")


@app.command("remove")
def cli_remove(number: int = typer.Argument(..., help="Book number as shown by 'list'")):
    """Delete a book; later books move up one place."""
    lib = _load()
    removed = lib.delete_at(_position(lib, number))
    _save(lib)
    print(f"Book {number} ({removed.title}) has been removed.")


@app.command("edit")
def cli_edit(
    number: int = typer.Argument(..., help="Book number as shown by 'list'"),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
    year: Optional[int] = typer.Option(None, "--year", "-y"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Current date, DD/MM/YYYY (default: today)"),
):
    """Change the title, author and/or publication year of a book."""
    if title is None and author is None and year is None:
        _fail("Nothing to update. Provide --title, --author and/or --year.")
    if title is not None and not TextValidator.validate_title(title):
        _fail(f"Error: title must be 1-{settings.max_field_length} characters.")
    if author is not None and not TextValidator.validate_author(author):
        _fail(f"Error: author must be 1-{settings.max_field_length} characters.")
    if year is not None and not YearValidator.validate_pub_year(year, year_of(_resolve_date(date))):
        _fail("Error: publication year must be after 0 AD and before the current year.")

    lib = _load()
    position = _position(lib, number)
    if title is not None:
        lib.edit_field(position, EditableField.TITLE, title.strip())
    if author is not None:
        lib.edit_field(position, EditableField.AUTHOR, author.strip())
    if year is not None:
        lib.edit_field(position, EditableField.PUB_YEAR, year)
    _save(lib)
    book = lib.find_by_position(position)
    print(f"Book {number} updated: {book.title}, {book.author}, {book.pub_year}")


@app.command("search")
def cli_search(
    field: SearchField = typer.Argument(..., help="title | author | year"),
    term: str = typer.Argument(..., help="Search term"),
):
    """Search by title or author (case-insensitive substring) or by exact year."""
    term = term.strip()
    matches = _load().search_books(field, term)
    print_search_result(matches, term)


@app.command("borrow")
def cli_borrow(
    number: int = typer.Argument(..., help="Book number as shown by 'list'"),
    name: str = typer.Argument(..., help="Borrower's full name"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Current date, DD/MM/YYYY (default: today)"),
):
    """Lend a book for a week."""
    name = name.strip()
    if not TextValidator.validate_borrower(name):
        _fail(f"Error: name must be 1-{settings.max_field_length} characters.")
    current_date = _resolve_date(date)

    lib = _load()
    try:
        loan = borrow_book(lib, _position(lib, number), name, current_date)
    except AlreadyOnLoanError:
        _fail("This book is already out")
    _save(lib)
    print(f"Book successfully borrowed, due {instant_to_text(loan.date_due)}")


@app.command("return")
def cli_return(number: int = typer.Argument(..., help="Book number as shown by 'list'")):
    """Mark a lent book as returned."""
    lib = _load()
    try:
        return_book(lib, _position(lib, number))
    except NotOnLoanError:
        _fail("This book is not currently out")
    _save(lib)
    print("Book successfully returned")


@app.command("overdue")
def cli_overdue(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Current date, DD/MM/YYYY (default: today)"),
):
    """Show books whose due date has passed."""
    current_date = _resolve_date(date)
    print_overdue_result(overdue_report(_load(), current_date))


@app.command("stats")
def cli_stats(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Current date, DD/MM/YYYY (default: today)"),
):
    """Show catalog statistics."""
    current_date = _resolve_date(date)
    print_stats_result(_load().get_statistics(current_date))


@app.command("menu")
def cli_menu():
    """Start the interactive menu."""
    run_menu(_data_file())


# --- Interactive menu ---
def confirm_or_replace_date(candidate: int) -> int:
    """Ask the operator to confirm ``candidate`` as today's date or type another one."""
    console.print(f"Today's date is: [bold]{instant_to_text(candidate)}[/]")
    if Confirm.ask("Is this correct?", default=True):
        return candidate

    while True:
        day = IntPrompt.ask("Day (dd)")
        month = IntPrompt.ask("Month (mm)")
        year = IntPrompt.ask("Year (yyyy)")
        text = f"{day:02d}/{month:02d}/{year:04d}"
        if DateFieldValidator.validate_fields(day, month, year) and is_plausible_text(text):
            return text_to_instant(text)
        console.print(f"[yellow]{text} is not a real date, try again.[/]")


def _ask_int(label: str, valid) -> int:
    while True:
        value = IntPrompt.ask(label)
        if valid(value):
            return value


def _ask_text(label: str) -> str:
    while True:
        value = Prompt.ask(f"{label} (max {settings.max_field_length} chars, ',' is saved as '.')").strip()
        if TextValidator.validate_text(value):
            return value
        console.print(f"[yellow]Must be 1-{settings.max_field_length} characters.[/]")


def _ask_pub_year(current_date: int) -> int:
    current_year = year_of(current_date)
    return _ask_int(f"Publication year (1 to {current_year - 1})",
                    lambda year: YearValidator.validate_pub_year(year, current_year))


def _ask_position(lib: Library, verb: str) -> Optional[int]:
    if not len(lib):
        console.print("[yellow]The catalog is empty.[/]")
        return None
    number = _ask_int(f"Book number to {verb}", lambda n: 1 <= n <= len(lib))
    return number - 1


def _book_panel(lib: Library, position: int, title: str) -> Panel:
    book = lib.find_by_position(position)
    return Panel(
        f"[bold]Title:[/] {escape(book.title)}\n"
        f"[bold]Author:[/] {escape(book.author)}\n"
        f"[bold]Publication year:[/] {book.pub_year}",
        title=title,
        border_style="yellow",
    )


def add(lib: Library, current_date: int) -> None:
    """Prompt for a new book and append it."""
    title = _ask_text("Title")
    author = _ask_text("Author")
    pub_year = _ask_pub_year(current_date)
    index = lib.add_book(title, author, pub_year, current_date)
    console.print(Panel.fit(f"[green]Added:[/] Book {index + 1}: [bold]{escape(title)}[/] - {escape(author)}",
                            title="✅ Success", border_style="green"))


def delete(lib: Library) -> None:
    """Delete a book after confirmation."""
    position = _ask_position(lib, "delete")
    if position is None:
        return
    console.print(_book_panel(lib, position, "📚 Book to delete"))
    if Confirm.ask("🗑️ Delete this book? (permanent)", default=False):
        removed = lib.delete_at(position)
        console.print(f"[green]✅ [bold]{escape(removed.title)}[/] deleted.[/]")
    else:
        console.print("[blue]🚫 Deletion cancelled.[/]")


def edit(lib: Library, current_date: int) -> None:
    """Edit title / author / publication year until the operator stops."""
    position = _ask_position(lib, "edit")
    if position is None:
        return
    while True:
        console.print(_book_panel(lib, position, "✏️ Editing"))
        choice = Prompt.ask("[t] Title  [a] Author  [p] Publication year  [q] Stop editing",
                            choices=["t", "a", "p", "q"], default="q")
        if choice == "t":
            lib.edit_field(position, EditableField.TITLE, _ask_text("Title"))
        elif choice == "a":
            lib.edit_field(position, EditableField.AUTHOR, _ask_text("Author"))
        elif choice == "p":
            lib.edit_field(position, EditableField.PUB_YEAR, _ask_pub_year(current_date))
        else:
            break


def borrow(lib: Library, current_date: int) -> None:
    position = _ask_position(lib, "borrow")
    if position is None:
        return
    if lib.find_by_position(position).is_on_loan:
        console.print("[yellow]This book is already out[/]")
        return
    loan = borrow_book(lib, position, _ask_text("Full name"), current_date)
    console.print(f"[green]Book successfully borrowed, due {instant_to_text(loan.date_due)}[/]")


def give_back(lib: Library) -> None:
    position = _ask_position(lib, "return")
    if position is None:
        return
    try:
        return_book(lib, position)
    except NotOnLoanError:
        console.print("[yellow]This book is not currently out[/]")
        return
    console.print("[green]Book successfully returned[/]")


def search(lib: Library, current_date: int) -> None:
    """Search, then optionally act on the results."""
    while True:
        console.clear()
        choice = Prompt.ask("Search by [t] Title  [a] Author  [p] Publication year", choices=["t", "a", "p"])
        field = {"t": SearchField.TITLE, "a": SearchField.AUTHOR, "p": SearchField.YEAR}[choice]
        term = Prompt.ask("Search term").strip()
        print_search_result(lib.search_books(field, term), term)

        action = Prompt.ask(
            "[b] Borrow  [r] Return  [e] Edit  [d] Delete  [s] Search again  [q] Stop searching",
            choices=["b", "r", "e", "d", "s", "q"],
            default="q",
        )
        if action == "b":
            borrow(lib, current_date)
        elif action == "r":
            give_back(lib)
        elif action == "e":
            edit(lib, current_date)
        elif action == "d":
            delete(lib)
        if action != "s":
            return


def check_overdue(lib: Library, current_date: int) -> None:
    print_overdue_result(overdue_report(lib, current_date))


def _wait() -> None:
    Prompt.ask("[q] Go back", choices=["q"], default="q")


def run_menu(path: Optional[str] = None):
    """Interactive menu: edits stay in memory until the operator quits."""
    path = path or database.DATABASE_FILE
    try:
        lib = database.load_file(path)
    except NotFoundError:
        console.print(f"[bold red]Database file, \"{path}\", cannot be found.[/]")
        return
    except LibraryError as e:
        console.print(f"[bold red]Could not read \"{path}\": {escape(str(e))}[/]")
        return
    console.clear()
    console.print(f"Database file, \"{path}\", successfully read.\n")

    current_date = confirm_or_replace_date(today())

    def render_menu() -> None:
        menu_items = [
            ("s", "Search books", "🔎"),
            ("l", "List books", "📚"),
            ("a", "Add a book", "➕"),
            ("c", "Check overdue books", "⏰"),
            ("q", "Quit program", "🚪"),
        ]

        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="bold cyan", width=4)
        table.add_column(justify="left", style="white")
        for key, label, icon in menu_items:
            table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")

        console.print(Panel(
            table,
            title=f"{APP_NAME} - {instant_to_text(current_date)}",
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        ))

    while True:
        console.clear()
        render_menu()
        choice = Prompt.ask("Choose an option", choices=["s", "l", "a", "c", "q"], default="l")

        if choice == "s":
            search(lib, current_date)
        elif choice == "l":
            console.clear()
            print_list_result(lib.list_books())
            _wait()
        elif choice == "a":
            console.clear()
            add(lib, current_date)
        elif choice == "c":
            console.clear()
            check_overdue(lib, current_date)
            _wait()
        elif choice == "q":
            console.print("Saving file, do not close...")
            try:
                database.save_file(path, lib)
            except LibraryError as e:
                console.print(f"[bold red]{escape(str(e))}[/]")
                if Confirm.ask("Quit without saving?", default=False):
                    break
                continue
            console.print("[green]File saved. Goodbye![/]")
            break


def main():
    if len(sys.argv) > 1:
        app()
    else:
        run_menu()


if __name__ == "__main__":
    main()
