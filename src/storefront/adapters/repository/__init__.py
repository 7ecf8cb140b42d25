"""Repository adapters - In-memory and database implementations."""

from .backup import BackupStorage, PeriodicSnapshotter, SnapshotWriter
from .memory import InMemoryStorage
from .postgres import PostgresStorage, run_migrations
from .seed import seed_storage

__all__ = [
    "BackupStorage",
    "InMemoryStorage",
    "PeriodicSnapshotter",
    "PostgresStorage",
    "SnapshotWriter",
    "run_migrations",
    "seed_storage",
]
