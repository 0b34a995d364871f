import json
from unittest.mock import MagicMock

import psycopg2
import pytest

from spend_categorizer.cli import categorize, init_db


@pytest.fixture
def offline_env(monkeypatch, tmp_path):
    """No credentials, local cache in a temp dir"""
    for name in ("ANTHROPIC_API_KEY", "DATABASE_URL", "DB_HOST", "BATCH_SIZE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    cache_path = tmp_path / "cache.json"
    monkeypatch.setenv("LOCAL_CACHE_PATH", str(cache_path))
    return cache_path


class TestCategorizeCli:

    def test_positional_descriptions(self, offline_env, capsys):
        categorize.main(["NETFLIX SUBSCRIPTION", "XYZ CORP 123", "--no-llm"])

        out = capsys.readouterr().out
        assert "Transactions: 2" in out
        assert "→ Entertainment" in out
        assert "→ Other" in out
        assert "Categorization complete" in out

    def test_json_in_json_out(self, offline_env, tmp_path, capsys):
        source = tmp_path / "in.json"
        source.write_text(json.dumps([
            {"description": "UBER TRIP", "amount": 12.5, "date": "2025-03-01", "currency": "EUR"},
            {"description": "MYSTERY", "amount": 3, "date": "2025-03-02", "currency": "EUR",
             "category": "Travel"},
        ]))
        target = tmp_path / "out.json"

        categorize.main(["--json", str(source), "--output", str(target), "--no-llm"])

        written = json.loads(target.read_text())
        assert [t["category"] for t in written] == ["Transportation", "Travel"]
        assert written[0]["amount"] == 12.5
        assert written[0]["date"] == "2025-03-01"

    def test_text_file(self, offline_env, tmp_path, capsys):
        source = tmp_path / "descriptions.txt"
        source.write_text("SPOTIFY\n\n  TESCO STORES  \n")

        categorize.main(["--file", str(source), "--no-llm"])

        assert "Transactions: 2" in capsys.readouterr().out

    def test_no_input_is_a_usage_error(self, offline_env):
        with pytest.raises(SystemExit) as exc_info:
            categorize.main(["--no-llm"])

        assert exc_info.value.code == 2

    def test_cache_stats_alone(self, offline_env, capsys):
        categorize.main(["--cache-stats", "--no-llm"])

        out = capsys.readouterr().out
        assert "Local cache: 0 mappings (remote off)" in out

    def test_bad_configuration_exits(self, offline_env, monkeypatch, capsys):
        monkeypatch.setenv("BATCH_SIZE", "lots")

        with pytest.raises(SystemExit) as exc_info:
            categorize.main(["NETFLIX", "--no-llm"])

        assert exc_info.value.code == 1
        assert "BATCH_SIZE" in capsys.readouterr().out

    def test_unreadable_json_exits(self, offline_env, tmp_path, capsys):
        source = tmp_path / "in.json"
        source.write_text(json.dumps({"description": "NOT A LIST"}))

        with pytest.raises(SystemExit) as exc_info:
            categorize.main(["--json", str(source), "--no-llm"])

        assert exc_info.value.code == 1
        assert "Could not read transactions" in capsys.readouterr().out


class TestInitDbCli:

    @pytest.fixture
    def connection(self, monkeypatch):
        conn = MagicMock()
        cursor = conn.cursor.return_value
        cursor.fetchone.return_value = (2,)
        cursor.fetchall.return_value = [("Travel", 2)]
        monkeypatch.setattr(init_db, "get_db_connection", lambda dsn=None: conn)
        return conn

    def test_applies_schema(self, connection, capsys):
        init_db.main([])

        first_sql = connection.cursor.return_value.execute.call_args_list[0].args[0]
        assert "CREATE TABLE IF NOT EXISTS category_transaction" in first_sql
        connection.commit.assert_called_once()
        connection.close.assert_called_once()
        out = capsys.readouterr().out
        assert "Cached mappings: 2" in out
        assert "Travel: 2" in out

    def test_schema_error_rolls_back(self, connection):
        connection.cursor.return_value.execute.side_effect = psycopg2.ProgrammingError("syntax error")

        with pytest.raises(SystemExit) as exc_info:
            init_db.main([])

        assert exc_info.value.code == 1
        connection.rollback.assert_called_once()
        connection.close.assert_called_once()

    def test_connection_failure(self, monkeypatch, capsys):
        def refuse(dsn=None):
            raise psycopg2.OperationalError("connection refused")

        monkeypatch.setattr(init_db, "get_db_connection", refuse)

        with pytest.raises(SystemExit) as exc_info:
            init_db.main(["--dsn", "postgresql://nowhere/spend"])

        assert exc_info.value.code == 1
        assert "Connection failed" in capsys.readouterr().out
