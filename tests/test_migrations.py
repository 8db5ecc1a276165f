from __future__ import annotations

from pathlib import Path

from backend_common.db.migrations import checksum, load_migrations

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def test_migrations_are_loaded_in_order(tmp_path):
    (tmp_path / "002_second.sql").write_text("SELECT 2;")
    (tmp_path / "001_first.sql").write_text("SELECT 1;")
    (tmp_path / "notes.txt").write_text("ignored")

    migrations = load_migrations(tmp_path)

    assert list(migrations) == ["001_first", "002_second"]


def test_project_schema_defines_dispatch_tables():
    migrations = load_migrations(MIGRATIONS_DIR)
    sql = "\n".join(path.read_text() for path in migrations.values())

    assert "CREATE TABLE IF NOT EXISTS integration_webhook" in sql
    assert "CREATE TABLE IF NOT EXISTS webhook_event" in sql


def test_checksum_is_stable():
    assert checksum("SELECT 1;") == checksum("SELECT 1;")
    assert checksum("SELECT 1;") != checksum("SELECT 2;")
