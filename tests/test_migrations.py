from wikibook_index_core.migrations.runner import Migration, apply_migrations, discover_migrations, pending_migrations


def test_discover_migrations_finds_init() -> None:
    assert [m.version for m in discover_migrations()][0] == "0001_init"


def test_pending_migrations_skips_applied(tmp_path) -> None:
    migs = [Migration("0001_a", tmp_path / "a.sql"), Migration("0002_b", tmp_path / "b.sql")]
    assert [m.version for m in pending_migrations({"0001_a"}, migs)] == ["0002_b"]


def test_migrations_are_idempotent(pg_dsn: str, pg_schema: str) -> None:
    applied = apply_migrations(pg_dsn, schema=pg_schema)
    assert applied == []
