import json
import os
from typing import Any, Dict, List
from rich.console import Console
from rich.table import Table

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "CATALOG_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _status(book: Any) -> str:
    if getattr(book, "is_borrowed", False):
        return f"borrowed by {book.borrower_id}, due {book.due_date}"
    return "available"


def print_book_list(books: List[Any], title: str = "Books") -> None:
    """Print books in the current output mode.
    - plain: 'ID - Title by Author [Genre] (status)' lines, or 'No books in catalog.'
    - json: JSON array of the wire representation
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in catalog.")
        return

    if mode == "json":
        payload: List[Dict[str, Any]] = [b.to_dict() for b in books]
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=f"📚 {title}", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Genre", style="green")
        table.add_column("Status", style="yellow")
        for b in books:
            table.add_row(b.id, b.title, b.author, b.genre, _status(b))
        _console.print(table)
    else:
        for b in books:
            print(f"{b.id} - {b.title} by {b.author} [{b.genre}] ({_status(b)})")
