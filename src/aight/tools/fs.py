"""Filesystem tools. Every path goes through the sandbox first."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from aight._exceptions import ToolExecutionError
from aight.sandbox import resolve


class ListFilesArguments(BaseModel):
    path: str = Field(description="Directory to list, relative to the working directory")


class TreeFilesArguments(BaseModel):
    path: str = Field(description="Directory to walk, relative to the working directory")


class ReadFileArguments(BaseModel):
    path: str = Field(description="File to read")


class WriteFileArguments(BaseModel):
    path: str = Field(description="File to write; parent directories are created")
    contents: str = Field(description="Text to write")
    append: bool = Field(default=False, description="Append instead of overwriting")


class MoveFileArguments(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from", description="Source path")
    to: str = Field(description="Destination path")


class RemoveFileArguments(BaseModel):
    path: str = Field(description="File to remove")


class PatchFileArguments(BaseModel):
    path: str = Field(description="File to patch")
    diff: str = Field(description="Unified diff to apply to the file")


def list_files(root: str, args: ListFilesArguments) -> list[dict[str, Any]]:
    path = resolve(root, args.path)

    result: list[dict[str, Any]] = []
    with os.scandir(path) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            item: dict[str, Any] = {"name": entry.name}
            if entry.is_dir():
                item["dir"] = True
            else:
                size = entry.stat().st_size
                if size:
                    item["size"] = size
            result.append(item)
    return result


def _walk(path: str, counts: dict[str, int]) -> list[dict[str, Any]]:
    contents: list[dict[str, Any]] = []
    with os.scandir(path) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if entry.is_dir(follow_symlinks=False):
                counts["directories"] += 1
                contents.append(
                    {
                        "type": "directory",
                        "name": entry.name,
                        "contents": _walk(entry.path, counts),
                    }
                )
            else:
                counts["files"] += 1
                contents.append({"type": "file", "name": entry.name})
    return contents


def tree_files(root: str, args: TreeFilesArguments) -> list[dict[str, Any]]:
    """Recursive listing in the shape of ``tree -J``."""
    path = resolve(root, args.path)
    if not os.path.isdir(path):
        raise NotADirectoryError(f"not a directory: {args.path}")

    counts = {"directories": 0, "files": 0}
    contents = _walk(path, counts)
    return [
        {"type": "directory", "name": args.path, "contents": contents},
        {"type": "report", **counts},
    ]


def read_file(root: str, args: ReadFileArguments) -> str:
    path = resolve(root, args.path)
    with open(path, encoding="utf-8", errors="replace") as fh:
        return fh.read()


def write_file(root: str, args: WriteFileArguments) -> bool:
    path = resolve(root, args.path)
    directory = os.path.dirname(path)
    os.makedirs(directory, exist_ok=True)

    if args.append:
        with open(path, "a", encoding="utf-8") as fh:
            fh.write(args.contents)
        return True

    # whole-file writes land atomically; concurrent writers race, never interleave
    fd, tmp = tempfile.mkstemp(dir=directory, prefix=".aight-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(args.contents)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    return True


def move_file(root: str, args: MoveFileArguments) -> bool:
    source = resolve(root, args.from_)
    target = resolve(root, args.to)
    os.rename(source, target)
    return True


def remove_file(root: str, args: RemoveFileArguments) -> bool:
    os.remove(resolve(root, args.path))
    return True


def patch_file(root: str, args: PatchFileArguments) -> str:
    """Apply a unified diff with the system ``patch`` program."""
    path = resolve(root, args.path)
    patch = shutil.which("patch")
    if patch is None:
        raise ToolExecutionError("patch program is not installed")

    diff = args.diff if args.diff.endswith("\n") else args.diff + "\n"
    completed = subprocess.run(
        [patch, "--batch", "--forward", "--no-backup-if-mismatch", path],
        input=diff,
        capture_output=True,
        text=True,
        cwd=root,
    )
    if completed.returncode != 0:
        raise ToolExecutionError(
            f"patch exited with status {completed.returncode}: "
            f"{(completed.stdout + completed.stderr).strip()}"
        )
    return completed.stdout.strip() or "ok"
