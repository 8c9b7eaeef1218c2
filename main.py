import subprocess
import sys
from typing import Optional

import typer
from rich.console import Console

from catalog import Catalog
from config import configure_logging, settings
from ui_helpers import print_book_list, set_output_mode

console = Console()

app = typer.Typer(help="Library catalog CLI")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level, e.g. DEBUG"),
):
    """Global CLI options."""
    configure_logging(log_level or "WARNING")
    if output:
        set_output_mode(output)


@app.command("list")
def cli_list():
    """List the books a freshly started catalog holds."""
    print_book_list(Catalog().list_all(), title="Catalog")


@app.command("recommend")
def cli_recommend():
    """Show the current recommendations."""
    print_book_list(Catalog().recommend(), title="Recommendations")


@app.command("popular")
def cli_popular():
    """Show books from the most borrowed genres."""
    print_book_list(Catalog().popular_by_genre(), title="Popular")


@app.command("penalty")
def cli_penalty(days_late: int = typer.Argument(..., help="Days past the due date")):
    """Compute the late-return penalty for a number of overdue days."""
    print(f"Penalty for {days_late} day(s) late: {Catalog(seed=False).penalty_for(days_late)}")


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the HTTP API with uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    print(f"Starting API on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        args.append("--reload")
    try:
        subprocess.run(args, check=False)
    except KeyboardInterrupt:
        console.print("[yellow]Server stopped.[/]")


if __name__ == "__main__":
    app()
