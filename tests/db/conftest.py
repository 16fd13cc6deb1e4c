from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path

import pytest

from sqlbridge.db.adapters.sqlite import SQLiteAdapter

SCHEMA_SQL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    name TEXT,
    active BOOLEAN
);

CREATE TABLE products (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    category TEXT,
    price REAL DEFAULT 0
);

CREATE INDEX idx_products_category ON products (category);
CREATE UNIQUE INDEX idx_products_name ON products (name);

INSERT INTO products (name, category, price) VALUES
    ('Hammer', 'tools', 9.5),
    ('Bob''s Saw', 'tools', 24.0),
    ('Rake', 'garden', 15.25),
    ('Hose', NULL, 30.0);

CREATE VIEW cheap_products AS
SELECT id, name FROM products WHERE price < 20;
"""


@pytest.fixture
def sqlite_path(tmp_path: Path) -> Path:
    db_path = tmp_path / "bridge.db"
    with closing(sqlite3.connect(db_path)) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    return db_path


@pytest.fixture
async def sqlite_adapter(sqlite_path: Path):
    adapter = SQLiteAdapter(f"sqlite:{sqlite_path}")
    await adapter.connect()
    try:
        yield adapter
    finally:
        await adapter.close()
