"""Blocking subprocess helper for the external command-line tools."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: bytes
    stderr: bytes


def run_subprocess(args: Sequence[str], *, capture_output: bool = True) -> RunResult:
    """Run ``args`` to completion.  No timeout is applied.

    Raises:
        FileNotFoundError: If the executable does not exist.
    """
    cp = subprocess.run(
        list(args),
        stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
        stderr=subprocess.PIPE if capture_output else subprocess.DEVNULL,
        check=False,
    )
    return RunResult(
        returncode=int(cp.returncode),
        stdout=cp.stdout or b"",
        stderr=cp.stderr or b"",
    )
