"""JSON file helpers: atomic replace and inter-process lock."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from pnpmarkets.errors import RegistryLocked


def read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def atomic_write_json(path: Path, data: Any) -> None:
    """Write data to a temp file in the same directory, then os.replace onto path.

    Readers see either the old file or the new one, never a partial write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


class RegistryFileLock(FileLock):
    """FileLock whose acquire timeout surfaces as RegistryLocked."""

    def acquire(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().acquire(*args, **kwargs)
        except Timeout as e:
            raise RegistryLocked(str(self.lock_file), self.timeout) from e


def make_lock(path: Path, timeout: float = 30.0) -> RegistryFileLock:
    """Return a lock guarding path (lock file is path + '.lock').

    The lock is reentrant within a process, so nested read-modify-write
    helpers can acquire it again.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    return RegistryFileLock(str(path) + ".lock", timeout=timeout)
