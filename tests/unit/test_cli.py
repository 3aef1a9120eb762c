"""Tests for the dirtree CLI."""

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger
from typer.testing import CliRunner

from dirtree.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _detach_logging() -> Iterator[None]:
    """Drop the sink bound to the runner's captured stderr after each test."""
    yield
    logger.remove()


@pytest.fixture
def db(tmp_path: Path) -> Path:
    path = tmp_path / "data" / "dirtree.db"
    result = runner.invoke(app, ["--db", str(path), "seed"])
    assert result.exit_code == 0, result.output
    assert "Created 5 directories" in result.output
    return path


def _json(db: Path, *args: str) -> list[dict]:
    result = runner.invoke(app, ["--db", str(db), *args, "--json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def _ids(db: Path) -> dict[str, int]:
    return {n["name"]: n["id"] for n in _json(db, "ls", "--all")}


def test_seed_creates_database_file(db: Path) -> None:
    assert db.exists()


def test_ls_lists_roots_in_order(db: Path) -> None:
    assert [n["name"] for n in _json(db, "ls")] == ["Projects", "Documents"]


def test_children_lists_in_order(db: Path) -> None:
    ids = _ids(db)
    children = _json(db, "children", str(ids["Projects"]))
    assert [c["path"] for c in children] == ["/Projects/Web", "/Projects/Mobile"]


def test_create_and_move(db: Path) -> None:
    ids = _ids(db)
    (created,) = _json(db, "create", "Frontend", "--parent", str(ids["Web"]))
    assert created["path"] == "/Projects/Web/Frontend"

    (moved,) = _json(
        db, "move", str(ids["Web"]), "--parent", str(ids["Documents"]), "--sort-order", "2"
    )
    assert moved["path"] == "/Documents/Web"

    result = runner.invoke(app, ["--db", str(db), "tree"])
    assert result.exit_code == 0
    assert "        - Frontend\n" in result.output


def test_move_into_descendant_fails(db: Path) -> None:
    ids = _ids(db)
    result = runner.invoke(
        app, ["--db", str(db), "move", str(ids["Projects"]), "--parent", str(ids["Web"])]
    )
    assert result.exit_code == 1


def test_children_of_missing_directory_fails(db: Path) -> None:
    result = runner.invoke(app, ["--db", str(db), "children", "999"])
    assert result.exit_code == 1


def test_reorder_from_file(db: Path, tmp_path: Path) -> None:
    ids = _ids(db)
    order_file = tmp_path / "order.json"
    order_file.write_text(
        json.dumps(
            [
                {"id": ids["Projects"], "parent_id": None, "sort_order": 2},
                {"id": ids["Documents"], "parent_id": None, "sort_order": 1},
            ]
        )
    )
    result = runner.invoke(app, ["--db", str(db), "reorder", str(order_file)])
    assert result.exit_code == 0, result.output
    assert [n["name"] for n in _json(db, "ls")] == ["Documents", "Projects"]


def test_reorder_from_stdin_rejects_invalid_json(db: Path) -> None:
    result = runner.invoke(app, ["--db", str(db), "reorder", "-"], input="not json")
    assert result.exit_code == 1


def test_reorder_missing_file_fails(db: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["--db", str(db), "reorder", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
    assert not isinstance(result.exception, FileNotFoundError)


def test_rm_deletes_subtree_and_check_passes(db: Path) -> None:
    ids = _ids(db)
    result = runner.invoke(app, ["--db", str(db), "rm", str(ids["Projects"])])
    assert result.exit_code == 0
    assert "Deleted 3 directories" in result.output
    assert sorted(_ids(db)) == ["Documents", "Tech"]

    result = runner.invoke(app, ["--db", str(db), "check"])
    assert result.exit_code == 0
    assert "Tree is consistent." in result.stdout


def test_check_reports_corruption(db: Path) -> None:
    import sqlite3

    conn = sqlite3.connect(str(db))
    conn.execute("UPDATE directory SET path = '/wrong' WHERE name = 'Web'")
    conn.commit()
    conn.close()

    result = runner.invoke(app, ["--db", str(db), "check"])
    assert result.exit_code == 1
    assert "expected '/Projects/Web'" in result.stdout


def test_db_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "env.db"
    monkeypatch.setenv("DIRTREE_DB", str(path))
    result = runner.invoke(app, ["create", "Inbox"])
    assert result.exit_code == 0, result.output
    assert path.exists()


def test_log_level_from_environment(db: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DIRTREE_LOG_LEVEL", "warning")
    result = runner.invoke(app, ["--db", str(db), "create", "Quiet"])
    assert result.exit_code == 0, result.output
    assert "Created directory" not in result.output
