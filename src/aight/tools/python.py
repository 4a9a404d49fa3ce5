"""Script execution tool."""

from __future__ import annotations

import subprocess
from typing import Union

from pydantic import BaseModel, Field

from aight._exceptions import ToolExecutionError
from aight.sandbox import resolve


class PythonArguments(BaseModel):
    script_name: str = Field(description="File name for the script; .py is appended if missing")
    code: str = Field(description="Python source to run")

    def __str__(self) -> str:
        return f"{self.script_name}\n{self.code}"


def python_execute(
    root: str,
    args: PythonArguments,
    *,
    interpreter: str,
    timeout: float,
) -> Union[str, dict[str, str]]:
    path = resolve(root, args.script_name)
    if not path.endswith(".py"):
        path += ".py"

    with open(path, "w", encoding="utf-8") as fh:
        fh.write(args.code)

    try:
        completed = subprocess.run(
            [interpreter, path],
            capture_output=True,
            text=True,
            cwd=root,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise ToolExecutionError(f"run python code: timed out after {timeout}s") from exc

    if completed.returncode != 0:
        raise ToolExecutionError(
            f"run python code: exit status {completed.returncode}\n{completed.stderr}".rstrip()
        )

    if not completed.stdout and not completed.stderr:
        return "ok"

    return {"stdout": completed.stdout, "stderr": completed.stderr}
