"""Utility functions for tests."""

# built-in modules
import stat
import textwrap
from pathlib import Path


def write_engine(directory: Path, body: str, name: str = "fake-engine") -> str:
    """Write an executable shell script that stands in for the engine binary.

    Args:
        directory: Where to create the script
        body: Shell script body (dedented, without the shebang)
        name: File name of the script

    Returns:
        str: Path to the script
    """
    path = directory / name
    path.write_text("#!/bin/sh\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


def tree(root: Path) -> dict:
    """Map every file under root (as a relative POSIX path) to its bytes."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }
