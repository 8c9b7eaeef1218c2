import json
from unittest.mock import patch

from typer.testing import CliRunner

from main import app

runner = CliRunner()


def test_list_books():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "1 - The Great Gatsby by F. Scott Fitzgerald [Fiction] (available)" in result.stdout
    assert "To Kill a Mockingbird" in result.stdout


def test_list_books_json(monkeypatch):
    # setenv first so the mode chosen by --output is undone after the test
    monkeypatch.setenv("CATALOG_CLI_OUTPUT", "plain")
    result = runner.invoke(app, ["--output", "json", "list"])
    assert result.exit_code == 0
    books = json.loads(result.stdout.strip())
    assert [b["id"] for b in books] == ["1", "2", "3"]


def test_recommend():
    result = runner.invoke(app, ["recommend"])
    assert result.exit_code == 0
    assert len(result.stdout.strip().splitlines()) == 3


def test_popular():
    result = runner.invoke(app, ["popular"])
    assert result.exit_code == 0
    assert "1984 by George Orwell [Dystopian]" in result.stdout


def test_penalty():
    result = runner.invoke(app, ["penalty", "16"])
    assert result.exit_code == 0
    assert "Penalty for 16 day(s) late: 4" in result.stdout


@patch("subprocess.run")
def test_serve_command(mock_subprocess_run):
    result = runner.invoke(app, ["serve", "--port", "9001"])
    assert result.exit_code == 0
    assert "Starting API on" in result.stdout
    mock_subprocess_run.assert_called_once()
    args = mock_subprocess_run.call_args[0][0]
    assert "uvicorn" in args
    assert "api:app" in args
    assert "9001" in args
