"""Tests for the tool catalogue, called through the registry like the model would."""

import json
import shutil
import sys

import pytest

from aight import PathEscapeError, ToolExecutionError
from aight.invoker import invoke_batch
from aight.registry import ToolRegistry
from aight.tools import register_tools
from aight.tools.sql import split_statements
from aight.types import ToolCallRequest


@pytest.fixture
def registry(tmp_path):
    return register_tools(ToolRegistry(), tmp_path, interpreter=sys.executable, exec_timeout=30)


@pytest.fixture
def call(registry):
    counter = iter(range(1_000_000))

    def _call(name, **arguments):
        return registry.call(ToolCallRequest(f"c{next(counter)}", name, json.dumps(arguments)))

    return _call


class TestCatalogue:
    def test_advertised_order(self, registry):
        assert registry.names == [
            "fs_list",
            "fs_tree",
            "fs_read",
            "fs_write",
            "fs_move",
            "fs_remove",
            "fs_patch",
            "sql_exec",
            "sql_query",
            "python_execute",
        ]

    def test_every_tool_has_an_object_schema(self, registry):
        for definition in registry.definitions:
            assert definition.description
            assert definition.input_schema["type"] == "object"


class TestFilesystem:
    def test_write_then_read(self, call, tmp_path):
        assert call("fs_write", path="notes/a.txt", contents="hello") is True
        assert (tmp_path / "notes" / "a.txt").read_text() == "hello"
        assert call("fs_read", path="notes/a.txt") == "hello"

    def test_append(self, call):
        call("fs_write", path="log.txt", contents="one\n")
        call("fs_write", path="log.txt", contents="two\n", append=True)
        assert call("fs_read", path="log.txt") == "one\ntwo\n"

    def test_overwrite_leaves_no_temp_files(self, call, tmp_path):
        call("fs_write", path="a.txt", contents="first")
        call("fs_write", path="a.txt", contents="second")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.txt"]

    def test_list(self, call, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "empty.txt").write_text("")
        (tmp_path / "full.txt").write_text("12345")

        assert call("fs_list", path="/") == [
            {"name": "empty.txt"},
            {"name": "full.txt", "size": 5},
            {"name": "sub", "dir": True},
        ]

    def test_tree(self, call, tmp_path):
        (tmp_path / "src" / "pkg").mkdir(parents=True)
        (tmp_path / "src" / "pkg" / "mod.py").write_text("x = 1")
        (tmp_path / "README").write_text("hi")

        tree, report = call("fs_tree", path=".")

        assert report == {"type": "report", "directories": 2, "files": 2}
        assert tree["type"] == "directory"
        assert [c["name"] for c in tree["contents"]] == ["README", "src"]
        pkg = tree["contents"][1]["contents"][0]
        assert pkg == {
            "type": "directory",
            "name": "pkg",
            "contents": [{"type": "file", "name": "mod.py"}],
        }

    def test_tree_of_a_file_fails(self, call, tmp_path):
        (tmp_path / "f").write_text("")
        with pytest.raises(NotADirectoryError):
            call("fs_tree", path="f")

    def test_move_and_remove(self, call, tmp_path):
        (tmp_path / "a.txt").write_text("x")

        assert call("fs_move", **{"from": "a.txt", "to": "b.txt"}) is True
        assert not (tmp_path / "a.txt").exists()
        assert (tmp_path / "b.txt").read_text() == "x"

        assert call("fs_remove", path="b.txt") is True
        assert not (tmp_path / "b.txt").exists()

    def test_read_missing_file(self, call):
        with pytest.raises(FileNotFoundError):
            call("fs_read", path="nope.txt")

    @pytest.mark.parametrize(
        "name,arguments",
        [
            ("fs_read", {"path": "../secret"}),
            ("fs_write", {"path": "/etc/passwd", "contents": "x"}),
            ("fs_move", {"from": "a", "to": "../b"}),
            ("sql_query", {"database": "/tmp/x.db", "query": "select 1"}),
            ("python_execute", {"script_name": "../evil", "code": "print(1)"}),
        ],
    )
    def test_sandbox_escape_is_refused(self, call, name, arguments):
        with pytest.raises(PathEscapeError):
            call(name, **arguments)

    def test_escape_surfaces_as_tool_error(self, registry):
        [result] = invoke_batch(
            registry, [ToolCallRequest("c1", "fs_read", '{"path": "../etc/passwd"}')]
        )
        assert result.is_error
        assert "must not contain '..'" in result.content

    @pytest.mark.skipif(shutil.which("patch") is None, reason="patch program not installed")
    def test_patch(self, call, tmp_path):
        (tmp_path / "greeting.txt").write_text("hello\nworld\n")
        diff = (
            "--- greeting.txt\n"
            "+++ greeting.txt\n"
            "@@ -1,2 +1,2 @@\n"
            " hello\n"
            "-world\n"
            "+there\n"
        )

        call("fs_patch", path="greeting.txt", diff=diff)

        assert (tmp_path / "greeting.txt").read_text() == "hello\nthere\n"

    @pytest.mark.skipif(shutil.which("patch") is None, reason="patch program not installed")
    def test_patch_that_does_not_apply(self, call, tmp_path):
        (tmp_path / "greeting.txt").write_text("something else\n")
        diff = "--- greeting.txt\n+++ greeting.txt\n@@ -1 +1 @@\n-world\n+there\n"

        with pytest.raises(ToolExecutionError, match="patch exited"):
            call("fs_patch", path="greeting.txt", diff=diff)


class TestSQL:
    def test_exec_and_query(self, call, tmp_path):
        call("sql_exec", database="app.db", query="CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
        inserted = call("sql_exec", database="app.db", query="INSERT INTO t (name) VALUES ('ada')")
        call("sql_exec", database="app.db", query="INSERT INTO t (name) VALUES ('bob')")

        assert inserted == {"last_insert_id": 1, "rows_affected": 1}
        assert (tmp_path / "app.db").exists()
        assert call("sql_query", database="app.db", query="SELECT id, name FROM t ORDER BY id") == [
            {"id": 1, "name": "ada"},
            {"id": 2, "name": "bob"},
        ]

    def test_update_reports_rows_affected(self, call):
        call("sql_exec", database="app.db", query="CREATE TABLE t (n INTEGER)")
        for n in range(3):
            call("sql_exec", database="app.db", query=f"INSERT INTO t VALUES ({n})")

        result = call("sql_exec", database="app.db", query="UPDATE t SET n = n + 1 WHERE n > 0")
        assert result["rows_affected"] == 2

    def test_exec_runs_a_script(self, call):
        result = call(
            "sql_exec",
            database="app.db",
            query="CREATE TABLE a (x); INSERT INTO a VALUES (1); INSERT INTO a VALUES (2);",
        )

        assert result == {"last_insert_id": 2, "rows_affected": 2}
        assert call("sql_query", database="app.db", query="SELECT x FROM a ORDER BY x") == [
            {"x": 1},
            {"x": 2},
        ]

    def test_semicolon_inside_a_literal_is_one_statement(self, call):
        call("sql_exec", database="app.db", query="CREATE TABLE notes (body TEXT)")
        result = call("sql_exec", database="app.db", query="INSERT INTO notes VALUES ('a; b')")

        assert result == {"last_insert_id": 1, "rows_affected": 1}
        assert call("sql_query", database="app.db", query="SELECT body FROM notes") == [
            {"body": "a; b"}
        ]

    @pytest.mark.parametrize(
        "script,expected",
        [
            ("SELECT 1", ["SELECT 1;"]),
            ("SELECT 1;", ["SELECT 1;"]),
            ("SELECT 1; SELECT 2", ["SELECT 1;", "SELECT 2;"]),
            ("INSERT INTO t VALUES ('x;y');", ["INSERT INTO t VALUES ('x;y');"]),
            (" ; ;", []),
        ],
    )
    def test_split_statements(self, script, expected):
        assert split_statements(script) == expected

    def test_bad_sql(self, call):
        import sqlite3

        with pytest.raises(sqlite3.Error):
            call("sql_query", database="app.db", query="SELEKT 1")


class TestPython:
    def test_prints_output(self, call, tmp_path):
        result = call("python_execute", script_name="math", code="print(6 * 7)")

        assert result == {"stdout": "42\n", "stderr": ""}
        assert (tmp_path / "math.py").read_text() == "print(6 * 7)"

    def test_silent_script(self, call):
        assert call("python_execute", script_name="quiet.py", code="x = 1") == "ok"

    def test_runs_in_working_directory(self, call, tmp_path):
        call("python_execute", script_name="touch", code="open('made.txt', 'w').write('y')")
        assert (tmp_path / "made.txt").read_text() == "y"

    def test_failure_carries_stderr(self, call):
        with pytest.raises(ToolExecutionError, match="ZeroDivisionError"):
            call("python_execute", script_name="boom", code="1 / 0")

    def test_timeout(self, tmp_path):
        registry = register_tools(ToolRegistry(), tmp_path, exec_timeout=0.5)
        request = ToolCallRequest(
            "c1", "python_execute", json.dumps({"script_name": "slow", "code": "import time; time.sleep(5)"})
        )
        with pytest.raises(ToolExecutionError, match="timed out"):
            registry.call(request)
