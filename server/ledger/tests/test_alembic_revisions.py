from pathlib import Path

VERSIONS_DIR = Path(__file__).resolve().parents[2] / "alembic" / "versions"


def _read_marker(text: str, marker: str) -> str | None:
    idx = text.find(marker)
    if idx == -1:
        return None
    start = idx + len(marker)
    return text[start:text.find('"', start)]


def test_alembic_revision_ids_fit_version_table_limit():
    """Postgres alembic_version.version_num is varchar(32)."""
    too_long = []
    for migration_file in VERSIONS_DIR.glob("*.py"):
        revision = _read_marker(migration_file.read_text(encoding="utf-8"), 'revision = "')
        if revision and len(revision) > 32:
            too_long.append((migration_file.name, revision))
    assert not too_long, f"Alembic revision IDs must be <= 32 chars. Found: {too_long}"


def test_initial_migration_creates_ledger_tables():
    text = (VERSIONS_DIR / "0001_initial.py").read_text(encoding="utf-8")
    for table in ("accounts", "journal_entries", "journal_lines", "audit_events"):
        assert f'"{table}"' in text
