"""Advisory single-invocation lock.

Two concurrent runs against one project root would race on tree
deletion and on the state marker. The lock file makes the
one-run-at-a-time contract explicit instead of silently tolerating it.
"""

from __future__ import annotations

import os
from pathlib import Path
from types import TracebackType

from core.errors import RunLockError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class RunLock:
    """Exclusive lock file held for the duration of one integration."""

    def __init__(self, lock_path: Path) -> None:
        self._lock_path = lock_path
        self._held = False

    def acquire(self) -> None:
        """Create the lock file or fail if another run holds it.

        Raises:
            RunLockError: If the lock file already exists or cannot be created.
        """
        try:
            self._lock_path.parent.mkdir(parents=True, exist_ok=True)
            descriptor = os.open(self._lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as error:
            if self._lock_path.parent.is_dir():
                raise RunLockError(
                    f"Another integration appears to be running: lock file {self._lock_path} "
                    "exists. Wait for it to finish, or delete the lock file if that run was killed."
                ) from error
            raise RunLockError(
                f"Cannot create lock file {self._lock_path}: {self._lock_path.parent} "
                "is not a directory. Check SURREALX_PROJECT_ROOT."
            ) from error
        except OSError as error:
            raise RunLockError(
                f"Cannot create lock file {self._lock_path}: {error}. "
                "Check that the project root is a writable directory."
            ) from error
        try:
            with os.fdopen(descriptor, "w", encoding="utf-8") as lock_file:
                lock_file.write(f"{os.getpid()}\n")
        except OSError as error:
            self._lock_path.unlink(missing_ok=True)
            raise RunLockError(f"Failed to write lock file {self._lock_path}: {error}.") from error
        self._held = True
        _LOGGER.debug("run_lock_acquired", lock_path=str(self._lock_path))

    def release(self) -> None:
        """Remove the lock file if this instance holds it."""
        if not self._held:
            return
        self._lock_path.unlink(missing_ok=True)
        self._held = False
        _LOGGER.debug("run_lock_released", lock_path=str(self._lock_path))

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()
