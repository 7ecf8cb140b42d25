"""
User-data snapshots for disaster recovery.

- ``SnapshotWriter`` serializes users (credentials redacted), preferences
  and addresses to a JSON side file, replacing it atomically.
- ``BackupStorage`` wraps any Storage implementation and writes a
  snapshot after every user-related mutation. Reads and non-user writes
  pass straight through to the wrapped storage.
- ``PeriodicSnapshotter`` writes a snapshot on a fixed interval from a
  daemon thread, independent of request handling.

Snapshot failures are logged and never propagate into the operation
that triggered them; the wrapped mutation has already committed.
"""

import logging
import os
import tempfile
import threading
from dataclasses import asdict
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from storefront.domain.models import User, UserAddress, UserPreference
from storefront.domain.ports import Storage

logger = logging.getLogger(__name__)

REDACTED_USER_FIELDS = frozenset({"password_hash", "reset_token", "reset_token_expiry"})

_SNAPSHOT_ADAPTER = TypeAdapter(dict[str, Any])


def redact_user(user: User) -> dict[str, Any]:
    """User as a dict without credentials or reset codes."""
    return {k: v for k, v in asdict(user).items() if k not in REDACTED_USER_FIELDS}


class SnapshotWriter:
    """Writes the redacted user-data snapshot file."""

    def __init__(self, storage: Storage, path: str | Path) -> None:
        self._storage = storage
        self._path = Path(path)
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def build(self) -> dict[str, Any]:
        users = self._storage.list_users()
        preferences = [self._storage.get_preferences(u.id) for u in users]
        addresses = [self._storage.list_addresses(u.id) for u in users]
        return {
            "users": [redact_user(u) for u in users],
            "userPreferences": [asdict(p) if p else None for p in preferences],
            "userAddresses": [[asdict(a) for a in owned] for owned in addresses],
        }

    def write(self) -> Path:
        """
        Write the snapshot, replacing the previous file atomically.

        Raises:
            OSError: If the file cannot be written
        """
        with self._write_lock:
            payload = _SNAPSHOT_ADAPTER.dump_json(self.build(), indent=2)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        return self._path

    def write_safely(self) -> bool:
        try:
            self.write()
        except Exception:
            logger.exception("Error backing up user data to %s", self._path)
            return False
        return True


class BackupStorage:
    """
    Storage decorator that snapshots user data after user-related writes.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, inner: Storage, writer: SnapshotWriter) -> None:
        self._inner = inner
        self._writer = writer

    @property
    def inner(self) -> Storage:
        return self._inner

    def __getattr__(self, name: str) -> Any:
        return getattr(self._inner, name)

    def _after_write(self, result: Any) -> Any:
        self._writer.write_safely()
        return result

    def create_user(self, user: User) -> User:
        return self._after_write(self._inner.create_user(user))

    def update_user(self, user_id: int, **changes: Any) -> User:
        return self._after_write(self._inner.update_user(user_id, **changes))

    def complete_registration(self, email: str, password_hash: str) -> User:
        return self._after_write(self._inner.complete_registration(email, password_hash))

    def create_preferences(self, preferences: UserPreference) -> UserPreference:
        return self._after_write(self._inner.create_preferences(preferences))

    def update_preferences(self, user_id: int, **changes: Any) -> UserPreference:
        return self._after_write(self._inner.update_preferences(user_id, **changes))

    def create_address(self, address: UserAddress) -> UserAddress:
        return self._after_write(self._inner.create_address(address))

    def update_address(self, address_id: int, user_id: int, **changes: Any) -> UserAddress:
        return self._after_write(self._inner.update_address(address_id, user_id, **changes))

    def delete_address(self, address_id: int, user_id: int) -> bool:
        return self._after_write(self._inner.delete_address(address_id, user_id))


class PeriodicSnapshotter:
    """Runs ``SnapshotWriter.write_safely`` every ``interval`` seconds."""

    def __init__(self, writer: SnapshotWriter, interval: float) -> None:
        self._writer = writer
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="user-snapshot", daemon=True
        )
        self._thread.start()
        logger.info("Periodic user snapshot every %ss to %s", self._interval, self._writer.path)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            if self._writer.write_safely():
                logger.info("Periodic backup completed: %s", self._writer.path)
