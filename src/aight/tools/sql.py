"""SQLite tools. Each call opens and closes its own connection."""

from __future__ import annotations

import sqlite3
from contextlib import closing
from typing import Any

from pydantic import BaseModel, Field

from aight.sandbox import resolve


class SQLExecArguments(BaseModel):
    database: str = Field(description="SQLite database file, relative to the working directory")
    query: str = Field(description="Statement to execute")

    def __str__(self) -> str:
        return self.query


class SQLQueryArguments(BaseModel):
    database: str = Field(description="SQLite database file, relative to the working directory")
    query: str = Field(description="Query returning rows")

    def __str__(self) -> str:
        return self.query


def _cell(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def split_statements(script: str) -> list[str]:
    """Split *script* into complete statements; semicolons inside literals stay put."""
    statements: list[str] = []
    pending = ""
    for piece in script.split(";"):
        pending += piece + ";"
        if sqlite3.complete_statement(pending):
            if pending.strip(" \t\r\n;"):
                statements.append(pending.strip())
            pending = ""
    # an unterminated literal or trigger body; let sqlite report it
    if pending.strip(" \t\r\n;"):
        statements.append(pending[:-1].strip())
    return statements


def sql_exec(root: str, args: SQLExecArguments) -> dict[str, Any]:
    path = resolve(root, args.database)
    with closing(sqlite3.connect(path)) as conn:
        if len(split_statements(args.query)) > 1:
            conn.executescript(args.query)
            (last_insert_id,) = conn.execute("SELECT last_insert_rowid()").fetchone()
            return {
                "last_insert_id": last_insert_id,
                "rows_affected": conn.total_changes,
            }

        with conn:
            cursor = conn.execute(args.query)
        return {
            "last_insert_id": cursor.lastrowid,
            "rows_affected": cursor.rowcount,
        }


def sql_query(root: str, args: SQLQueryArguments) -> list[dict[str, Any]]:
    path = resolve(root, args.database)
    with closing(sqlite3.connect(path)) as conn:
        conn.row_factory = sqlite3.Row
        rows = conn.execute(args.query).fetchall()
    return [{key: _cell(row[key]) for key in row.keys()} for row in rows]
