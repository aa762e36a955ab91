"""Tests for the stmtimport command line."""

import json

from stmtimport.cli.main import cli


def _invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_import_csv(cli_runner, temp_db, fixtures_dir):
    """Test importing the sample CSV statement."""
    result = _invoke(
        cli_runner,
        temp_db,
        "import",
        str(fixtures_dir / "sample_statement.csv"),
        "--config",
        str(fixtures_dir / "sample_config.json"),
    )

    assert result.exit_code == 0
    assert "Import complete:" in result.output
    assert "Entries: 5" in result.output
    assert "Imported: 4 transactions" in result.output
    assert "Ignored: 1" in result.output
    assert len(temp_db.list_transactions(user_id=1)) == 4


def test_import_twice_skips_duplicates(cli_runner, temp_db, fixtures_dir):
    """Test that importing the same statement again creates nothing."""
    args = [
        "import",
        str(fixtures_dir / "sample_statement.ofx"),
        "--config",
        str(fixtures_dir / "sample_ofx_config.json"),
    ]
    assert _invoke(cli_runner, temp_db, *args).exit_code == 0

    result = _invoke(cli_runner, temp_db, *args)
    assert result.exit_code == 0
    assert "Imported: 0 transactions" in result.output
    assert "Skipped: 3 duplicates" in result.output


def test_import_dry_run_json(cli_runner, temp_db, fixtures_dir):
    """Test a dry run with JSON output."""
    result = _invoke(
        cli_runner,
        temp_db,
        "import",
        str(fixtures_dir / "sample_statement.ofx"),
        "--config",
        str(fixtures_dir / "sample_ofx_config.json"),
        "--dry-run",
        "--json",
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["dry_run"] is True
    assert payload["created_count"] == 0
    assert [p["description"] for p in payload["previewed_transactions"]] == ["PHARMACY", "BAKERY", "Salary"]
    assert payload["previewed_transactions"][1]["amount"] == "12.35"
    assert payload["previewed_transactions"][0]["responsibilities"] == [
        {"responsible_id": 7, "percentage": "60", "notes": "household"},
        {"responsible_id": 8, "percentage": "40.00", "notes": None},
    ]
    assert temp_db.list_transactions(user_id=1) == []


def test_import_user_override(cli_runner, temp_db, fixtures_dir):
    """Test that --user-id overrides the configured owner."""
    result = _invoke(
        cli_runner,
        temp_db,
        "import",
        str(fixtures_dir / "sample_statement.ofx"),
        "--config",
        str(fixtures_dir / "sample_ofx_config.json"),
        "--user-id",
        "7",
    )

    assert result.exit_code == 0
    assert len(temp_db.list_transactions(user_id=7)) == 3
    assert temp_db.list_transactions(user_id=1) == []


def test_import_configuration_error(cli_runner, temp_db, fixtures_dir):
    """Test that an unusable configuration exits with an error."""
    result = _invoke(
        cli_runner,
        temp_db,
        "import",
        str(fixtures_dir / "sample_statement.csv"),
        "--config",
        str(fixtures_dir / "sample_ofx_config.json"),
    )

    assert result.exit_code == 1
    assert "Error: CSV configuration is required" in result.output


def test_import_format_override(cli_runner, temp_db, fixtures_dir):
    """Test that --format takes precedence over the file name."""
    result = _invoke(
        cli_runner,
        temp_db,
        "import",
        str(fixtures_dir / "sample_statement.csv"),
        "--config",
        str(fixtures_dir / "sample_ofx_config.json"),
        "--format",
        "ofx",
    )

    assert result.exit_code == 1
    assert "missing <OFX> element" in result.output


def test_import_reports_issues(cli_runner, temp_db, fixtures_dir):
    """Test that per-record issues are listed."""
    result = _invoke(
        cli_runner,
        temp_db,
        "import",
        str(fixtures_dir / "sample_creditcard.ofx"),
        "--config",
        str(fixtures_dir / "sample_ofx_config.json"),
    )

    assert result.exit_code == 0
    assert "Issues: 1" in result.output
    assert "Line 3 [CC3] (parsing_error)" in result.output


def test_list_transactions(cli_runner, temp_db, fixtures_dir):
    """Test listing imported transactions."""
    _invoke(
        cli_runner,
        temp_db,
        "import",
        str(fixtures_dir / "sample_statement.ofx"),
        "--config",
        str(fixtures_dir / "sample_ofx_config.json"),
    )

    result = _invoke(cli_runner, temp_db, "list", "--user-id", "1", "--start-date", "2024-01-06")
    assert result.exit_code == 0
    assert "Found 2 transaction(s):" in result.output
    assert "BAKERY" in result.output
    assert "Salary" in result.output
    assert "PHARMACY" not in result.output


def test_list_no_transactions(cli_runner, temp_db):
    """Test listing when nothing was imported."""
    result = _invoke(cli_runner, temp_db, "list", "--user-id", "1")
    assert result.exit_code == 0
    assert "No transactions found." in result.output


def test_list_invalid_date(cli_runner, temp_db):
    """Test that an invalid bound is rejected."""
    result = _invoke(cli_runner, temp_db, "list", "--user-id", "1", "--end-date", "someday")
    assert result.exit_code == 1
    assert "Invalid end date" in result.output
