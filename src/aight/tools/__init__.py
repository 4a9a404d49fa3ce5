"""
The tool catalogue offered to the model.

``register_tools`` binds every handler to the working directory and registers
it; the order below is the order the model sees.
"""

from __future__ import annotations

import os
import sys
from functools import partial

from aight.registry import ToolRegistry
from aight.tools import fs, sql
from aight.tools.python import PythonArguments, python_execute

__all__ = ["register_tools", "DEFAULT_EXEC_TIMEOUT"]

DEFAULT_EXEC_TIMEOUT = 120.0


def register_tools(
    registry: ToolRegistry,
    root: str | os.PathLike[str],
    *,
    interpreter: str = sys.executable,
    exec_timeout: float = DEFAULT_EXEC_TIMEOUT,
) -> ToolRegistry:
    root = os.fspath(root)

    registry.register(
        "fs_list", "Filesystem: List files in the given path",
        fs.ListFilesArguments, partial(fs.list_files, root),
    )
    registry.register(
        "fs_tree",
        "Filesystem: List files in the given path recursively. Useful for starting point.",
        fs.TreeFilesArguments, partial(fs.tree_files, root),
    )
    registry.register(
        "fs_read",
        "Filesystem: Read file by the given path. Avoid using this for large files. "
        "Avoid using it for non-text files like images.",
        fs.ReadFileArguments, partial(fs.read_file, root),
    )
    registry.register(
        "fs_write", "Filesystem: Write file by the given path.",
        fs.WriteFileArguments, partial(fs.write_file, root),
    )
    registry.register(
        "fs_move", "Filesystem: Move file",
        fs.MoveFileArguments, partial(fs.move_file, root),
    )
    registry.register(
        "fs_remove", "Filesystem: Remove file",
        fs.RemoveFileArguments, partial(fs.remove_file, root),
    )
    registry.register(
        "fs_patch", "Filesystem: Apply a unified diff to the file by the given path",
        fs.PatchFileArguments, partial(fs.patch_file, root),
    )
    registry.register(
        "sql_exec",
        "SQLite: execute statement and return result (rows affected, last insert id)",
        sql.SQLExecArguments, partial(sql.sql_exec, root),
    )
    registry.register(
        "sql_query", "SQLite: execute query and return result (rows)",
        sql.SQLQueryArguments, partial(sql.sql_query, root),
    )
    registry.register(
        "python_execute", "Execute python code. This is especially useful for math.",
        PythonArguments,
        partial(python_execute, root, interpreter=interpreter, timeout=exec_timeout),
    )
    return registry
