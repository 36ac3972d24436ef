"""Port for durable backup snapshot documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from settlepy.domain.backup import Snapshot


@runtime_checkable
class SnapshotStorage(Protocol):
    """Stores snapshots keyed by name and timestamp."""

    def save(self, snapshot: Snapshot) -> str:
        """Persist ``snapshot`` and return its storage key."""
        ...

    def load(self, name: str) -> Snapshot | None:
        """Return the newest snapshot named ``name``, if any."""
        ...

    def list(self) -> list[Snapshot]:
        """Return all stored snapshots, newest first."""
        ...
