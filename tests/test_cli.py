"""Tests for CLI commands."""

import sqlite3
from contextlib import closing
from pathlib import Path

import pytest
from click.testing import CliRunner

from sqlbridge.cli.commands.database import parse_filter, parse_sort
from sqlbridge.cli.main import cli
from sqlbridge.db.models import FilterOperator, SortDirection


@pytest.fixture
def temp_db(temp_dir: Path) -> Path:
    """Create a temporary SQLite database for testing."""
    db_path = temp_dir / "shop.db"
    with closing(sqlite3.connect(db_path)) as conn:
        conn.executescript("""
            CREATE TABLE products (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                category TEXT,
                price REAL
            );

            CREATE UNIQUE INDEX idx_products_name ON products (name);

            INSERT INTO products (name, category, price) VALUES
                ('Hammer', 'tools', 9.5),
                ('Saw', 'tools', 24.0),
                ('Rake', 'garden', 15.25);

            CREATE VIEW garden_products AS
            SELECT * FROM products WHERE category = 'garden';
        """)
        conn.commit()
    return db_path


@pytest.fixture
def temp_config(temp_dir: Path, temp_db: Path) -> Path:
    """Create a temporary configuration file."""
    config_path = temp_dir / "sqlbridge.yaml"
    config_path.write_text(
        f"""
databases:
  shop:
    type: sqlite
    path: {temp_db}

default_database: shop
""",
        encoding="utf-8",
    )
    return config_path


def invoke(config: Path, *args: str):
    return CliRunner().invoke(cli, ["--config", str(config), *args])


class TestCLIBasic:
    """Test basic CLI functionality."""

    def test_cli_without_command_shows_help(self):
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 0
        assert "Usage" in result.output


class TestCLIConfig:
    """Test configuration management commands."""

    def test_config_sample_creation(self, temp_dir):
        config_path = temp_dir / "sample_config.yaml"
        result = CliRunner().invoke(cli, ["config", "sample", str(config_path)])
        assert result.exit_code == 0
        assert "Sample configuration created" in result.output
        assert config_path.exists()

    def test_config_validation_valid(self, temp_config):
        result = CliRunner().invoke(cli, ["config", "validate", str(temp_config)])
        assert result.exit_code == 0
        assert "valid" in result.output
        assert "SQLite" in result.output
        assert "shop" in result.output

    def test_config_validation_invalid(self, temp_dir):
        bad = temp_dir / "bad.yaml"
        bad.write_text("databases: invalid_structure", encoding="utf-8")
        result = CliRunner().invoke(cli, ["config", "validate", str(bad)])
        assert result.exit_code == 1
        assert "validation failed" in result.output


class TestCLIDatabase:
    """Test browsing commands against a SQLite profile."""

    def test_connection(self, temp_config):
        result = invoke(temp_config, "db", "test")
        assert result.exit_code == 0
        assert "SUCCESS" in result.output

    def test_schemas(self, temp_config):
        result = invoke(temp_config, "db", "schemas")
        assert result.exit_code == 0
        assert "main" in result.output

    def test_tables(self, temp_config):
        result = invoke(temp_config, "db", "tables")
        assert result.exit_code == 0
        assert "products" in result.output
        assert "garden_products" in result.output
        assert "Total: 2 table(s)" in result.output

    def test_describe(self, temp_config):
        result = invoke(temp_config, "db", "describe", "products")
        assert result.exit_code == 0
        assert "Table Structure: products" in result.output
        assert "category" in result.output

    def test_indexes(self, temp_config):
        result = invoke(temp_config, "db", "indexes", "products")
        assert result.exit_code == 0
        assert "idx_products_name" in result.output

    def test_browse_with_filter_and_sort(self, temp_config):
        result = invoke(
            temp_config, "db", "browse", "products",
            "--filter", "category:equals:tools", "--sort", "price:desc",
        )
        assert result.exit_code == 0
        assert result.output.index("Saw") < result.output.index("Hammer")
        assert "Rake" not in result.output
        assert "Rows 1-2 of 2" in result.output

    def test_browse_bad_filter(self, temp_config):
        result = invoke(temp_config, "db", "browse", "products", "--filter", "category")
        assert result.exit_code == 2

    def test_unknown_profile(self, temp_config):
        result = invoke(temp_config, "--db", "missing", "db", "tables")
        assert result.exit_code == 1
        assert "not found" in result.output


class TestCLIQuery:
    """Test ad hoc statement execution."""

    def test_select(self, temp_config):
        result = invoke(temp_config, "query", "SELECT name FROM products ORDER BY id")
        assert result.exit_code == 0
        assert "Hammer" in result.output
        assert "3 row(s)" in result.output

    def test_delete(self, temp_config):
        result = invoke(temp_config, "query", "DELETE FROM products WHERE category = 'garden'")
        assert result.exit_code == 0
        assert "1 row(s) affected" in result.output

    def test_wrapped(self, temp_config):
        result = invoke(
            temp_config, "query", "SELECT name, category FROM products",
            "--wrap", "--filter", "category:equals:tools", "--sort", "name", "--limit", "1",
        )
        assert result.exit_code == 0
        assert "Hammer" in result.output
        assert "Saw" not in result.output

    def test_bad_sql(self, temp_config):
        result = invoke(temp_config, "query", "SELEC 1")
        assert result.exit_code == 1
        assert "Query failed" in result.output


def test_parse_helpers():
    assert parse_sort("price:desc").direction is SortDirection.DESC
    condition = parse_filter("created:greaterthan:2024-01-01 10:00")
    assert condition.operator is FilterOperator.GREATER_THAN
    assert condition.value == "2024-01-01 10:00"
    with pytest.raises(ValueError):
        parse_filter(":equals:x")
    with pytest.raises(ValueError):
        parse_filter("name:contains")
    assert parse_filter("category:isnull").operator is FilterOperator.IS_NULL
    assert parse_filter("category:equals:").value == ""


def test_browse_filter_without_value(temp_config):
    result = invoke(temp_config, "db", "browse", "products", "--filter", "name:contains")
    assert result.exit_code == 2
    assert "needs a value" in result.output
