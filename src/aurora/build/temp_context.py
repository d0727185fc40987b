"""Disposable build context staging.

A production build never runs against the working tree itself. The tree is
copied into a fresh temporary directory, the generated .env and Dockerfile
are written there, and the directory is removed when the build scope exits,
whatever the reason.
"""

import fcntl
import fnmatch
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from aurora.errors import BuildInProgressError
from aurora.utils.logger import get_logger

logger = get_logger("build")

TEMP_PREFIX = "aurora-build-"
LOCK_FILENAME = "build.lock"


class TempContextPreparer:
    """Create, populate and remove the temporary build context."""

    def __init__(
        self,
        project_root: str | Path,
        excludes: list[str] | None = None,
        skip_paths: list[str | Path] | None = None,
    ):
        """
        Args:
            project_root: Working tree to stage
            excludes: Glob patterns left out of the copy, matched against paths
                relative to the project root (``vendor`` only drops the top-level
                directory, ``*.log`` drops log files anywhere)
            skip_paths: Absolute paths left out of the copy (e.g. the storage root)
        """
        self.project_root = Path(project_root)
        self.excludes = list(excludes or [])
        self.skip_paths = {Path(p).resolve() for p in (skip_paths or [])}
        self.path: Path | None = None

    def _ignore(self, directory: str, names: list[str]) -> set[str]:
        relative_dir = Path(directory).relative_to(self.project_root)
        ignored = set()
        for name in names:
            relative = (relative_dir / name).as_posix()
            if any(fnmatch.fnmatch(relative, pattern) for pattern in self.excludes):
                ignored.add(name)
            elif (Path(directory) / name).resolve() in self.skip_paths:
                ignored.add(name)
        return ignored

    def prepare(self) -> Path:
        """Create a uniquely named temp directory and stage the working tree into it."""
        path = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
        self.path = path
        logger.trace(f"Staging build context in {path}")

        try:
            shutil.copytree(
                self.project_root, path, ignore=self._ignore, symlinks=True, dirs_exist_ok=True
            )
        except (OSError, shutil.Error):
            self.remove()
            raise

        return path

    def remove(self) -> None:
        """Recursively delete the temp directory. Safe to call more than once."""
        if self.path is None:
            return
        if self.path.exists():
            shutil.rmtree(self.path)
            logger.trace(f"Removed build context {self.path}")
        self.path = None

    @contextmanager
    def session(self) -> Iterator[Path]:
        """Yield a prepared context and remove it on every exit path."""
        path = self.prepare()
        try:
            yield path
        finally:
            self.remove()


class BuildLock:
    """Exclusive lock rejecting concurrent builds of one project.

    The lock is an ``flock`` held on ``build.lock`` for the duration of the
    build; the kernel releases it when the owner exits, however it exits.
    The file records the owner's pid for the error message only.
    """

    def __init__(self, directory: str | Path):
        self.path = Path(directory) / LOCK_FILENAME
        self._fd: int | None = None

    def acquire(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_CREAT | os.O_RDWR, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            owner = self._read_owner()
            running = f" (pid {owner})" if owner is not None else ""
            raise BuildInProgressError(
                f"Another production build{running} is already running for this project.",
                str(self.path),
                owner,
            ) from None

        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode())
        self._fd = fd
        logger.trace(f"Acquired build lock {self.path}")

    def release(self) -> None:
        if self._fd is None:
            return
        # Never unlinked, so every acquirer locks the same inode.
        os.ftruncate(self._fd, 0)
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None

    def _read_owner(self) -> int | None:
        try:
            return int(self.path.read_text().strip())
        except (OSError, ValueError):
            return None

    def __enter__(self) -> "BuildLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
