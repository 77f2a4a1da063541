import os
import json
from typing import Any, Dict, List, Sequence, Tuple
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from book import Book
from config import settings
from lending import OverdueEntry

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, settings.output_mode).lower()


def _book_table(title: str, rows: Sequence[Tuple[int, Book]]) -> Table:
    table = Table(title=title, show_lines=True, header_style="bold cyan")
    table.add_column("#", style="magenta", no_wrap=True, justify="right")
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Year", justify="right")
    table.add_column("Added", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    for position, book in rows:
        shown = book.to_display_dict()
        status = "[red]Out[/]" if book.is_on_loan else "[green]Available[/]"
        table.add_row(str(position + 1), book.title, book.author, str(book.pub_year), shown["date_added"], status)
    return table


def print_list_result(books: Sequence[Book]) -> None:
    """Print the full catalog in the current output mode.
    - plain: one 'Book N: Title, Author, Year (STATUS)' line per book, or 'No books in library.'
    - json: array of display dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in library.")
        return

    rows = list(enumerate(books))
    if mode == "json":
        print(json.dumps([b.to_display_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        _console.print(_book_table("📚 Catalog", rows))
        _console.print(f"[dim]📊 {len(books)} books[/]")
    else:
        for position, b in rows:
            print(f"Book {position + 1}: {b.title}, {b.author}, {b.pub_year} ({b.status.upper()})")


def print_search_result(matches: List[Tuple[int, Book]], term: str) -> None:
    mode = get_output_mode()

    if not matches:
        print(f"No books matching '{term}'.")
        return

    if mode == "json":
        payload = [dict(b.to_display_dict(), position=pos + 1) for pos, b in matches]
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        _console.print(_book_table(f"🔎 Matches for '{term}'", matches))
    else:
        print("Matching books:")
        for pos, b in matches:
            print(f"Book {pos + 1}: {b.title}, {b.author}, {b.pub_year} ({b.status.upper()})")


def print_overdue_result(entries: List[OverdueEntry]) -> None:
    mode = get_output_mode()

    if mode == "json":
        payload = [
            {"position": e.position + 1, "title": e.title, "borrower": e.borrower, "days_overdue": e.days_overdue}
            for e in entries
        ]
        print(json.dumps(payload, ensure_ascii=False))
        return

    if not entries:
        print("No overdue books.")
        return

    if mode == "rich":
        table = Table(title="⏰ Currently overdue books", header_style="bold red")
        table.add_column("#", style="magenta", justify="right")
        table.add_column("Title")
        table.add_column("Borrower")
        table.add_column("Days overdue", justify="right")
        for e in entries:
            table.add_row(str(e.position + 1), e.title, e.borrower, str(e.days_overdue))
        _console.print(table)
    else:
        print("Currently overdue books:")
        for e in entries:
            print(f"{e.position + 1}. {e.title}, {e.borrower}, {e.days_overdue} days overdue")


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics in the current output mode."""
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = [
        ("total_books", "Total Books"),
        ("available", "Available"),
        ("on_loan", "On Loan"),
        ("overdue", "Overdue"),
        ("unique_authors", "Unique Authors"),
    ]
    present = [(key, label) for key, label in labels if key in stats]

    if mode == "json":
        print(json.dumps({key: stats[key] for key, _ in present}, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {stats[key]}" for key, label in present)
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for key, label in present:
            print(f"{label}: {stats[key]}")
