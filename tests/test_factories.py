"""Tests for opening the books database."""

from pathlib import Path

from bankbooks.database.factories import DEFAULT_DB_PATH, create_sqlite_database, resolve_database_path


class TestResolveDatabasePath:
    """Tests for resolve_database_path."""

    def test_explicit_path_wins(self, monkeypatch, tmp_path):
        """Test that an explicit path beats the environment variable."""
        monkeypatch.setenv("BANKBOOKS_DB_PATH", str(tmp_path / "env.db"))

        assert resolve_database_path(str(tmp_path / "books.db")) == tmp_path / "books.db"

    def test_environment_variable(self, monkeypatch, tmp_path):
        """Test that BANKBOOKS_DB_PATH is used when no path is given."""
        monkeypatch.setenv("BANKBOOKS_DB_PATH", str(tmp_path / "env.db"))

        assert resolve_database_path() == tmp_path / "env.db"

    def test_default_location(self, monkeypatch):
        """Test that the books default to ~/.bankbooks/bankbooks.db."""
        monkeypatch.delenv("BANKBOOKS_DB_PATH", raising=False)

        assert resolve_database_path() == DEFAULT_DB_PATH
        assert DEFAULT_DB_PATH == Path.home() / ".bankbooks" / "bankbooks.db"


class TestCreateSqliteDatabase:
    """Tests for create_sqlite_database."""

    def test_missing_directories_are_created(self, tmp_path):
        """Test that the database directory is created before the file is opened."""
        path = tmp_path / "clients" / "acme" / "books.db"

        db = create_sqlite_database(str(path))
        db.connect()
        db.initialize_schema()
        try:
            assert path.parent.is_dir()
            assert db.list_companies() == []
        finally:
            db.disconnect()
