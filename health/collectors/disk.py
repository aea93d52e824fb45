"""
health.collectors.disk
AUTHOR: carter-vin

Disk collector
- runs `df -hP <path>` as a subprocess, bounded by a timeout
- parses the data row: filesystem, size, used, available, use%
- every failure surfaces as DiskCheckError with context
"""

from __future__ import annotations

import asyncio
import contextlib
import re
from dataclasses import dataclass
from typing import Sequence

DEFAULT_DISK_TIMEOUT_S = 5.0

_LEADING_INT = re.compile(r"^\s*(\d+)")


class DiskCheckError(RuntimeError):
    """Raised when disk usage cannot be determined."""

    def __init__(self, cause: str) -> None:
        super().__init__(f"Failed to check disk space: {cause}")
        self.cause = cause


@dataclass(frozen=True)
class DiskResult:
    filesystem: str
    size: str
    used: str
    available: str
    used_percentage: int


def df_command(path: str) -> list[str]:
    # -P keeps each filesystem on a single line
    return ["df", "-hP", path]


def _parse_percentage(value: str) -> int:
    """
    Parse the leading digits of a value like '95%'
    """
    match = _LEADING_INT.match(value)
    if match is None:
        raise ValueError(f"unparsable usage percentage: {value!r}")
    return int(match.group(1))


def parse_df_output(stdout: str) -> DiskResult:
    """
    Parse tabular df output; the second line holds the data row
    """
    lines = stdout.strip().splitlines()
    if len(lines) < 2:
        raise ValueError("df output has no data row")

    fields = lines[1].split()
    if len(fields) < 5:
        raise ValueError(f"df data row has {len(fields)} fields, expected at least 5")

    filesystem, size, used, available, percentage = fields[:5]
    return DiskResult(
        filesystem=filesystem,
        size=size,
        used=used,
        available=available,
        used_percentage=_parse_percentage(percentage),
    )


async def _run(argv: Sequence[str], timeout_s: float) -> str:
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except asyncio.TimeoutError:
        raise DiskCheckError(f"timed out after {timeout_s}s") from None
    finally:
        # Timeout or cancellation: never leave the child running
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()

    if proc.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip()
        raise DiskCheckError(
            f"command {' '.join(argv)!r} exited with status {proc.returncode}"
            + (f": {detail}" if detail else "")
        )

    return stdout.decode("utf-8", errors="replace")


async def check_disk_space(
    path: str = "/",
    *,
    timeout_s: float = DEFAULT_DISK_TIMEOUT_S,
    command: Sequence[str] | None = None,
) -> DiskResult:
    """
    Query disk usage for the filesystem holding `path`

    Failure semantics:
    - raises DiskCheckError on spawn failure, non-zero exit, timeout, parse error
    """
    argv = list(command) if command is not None else df_command(path)

    try:
        stdout = await _run(argv, timeout_s)
        return parse_df_output(stdout)
    except DiskCheckError:
        raise
    except (OSError, ValueError) as e:
        raise DiskCheckError(str(e)) from e
