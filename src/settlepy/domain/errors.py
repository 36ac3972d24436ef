"""Domain error types.

Leaf helpers raise these; the ingest pipeline converts the row-level ones
(:class:`MappingError`, :class:`FormatError`) into ``Issue`` diagnostics so a
single bad row never aborts a run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from settlepy.domain.model import ReferenceKind


class SettlepyError(Exception):
    """Base class for domain errors."""


class MappingError(SettlepyError):
    """A member/channel/category/project token did not resolve to an id."""

    def __init__(self, kind: ReferenceKind, token: str) -> None:
        self.kind = kind
        self.token = token
        super().__init__(f"Unknown {kind}: '{token}'")


class FormatError(SettlepyError, ValueError):
    """A date value does not match any supported shape or is not a real date."""

    def __init__(self, value: object, reason: str = "unsupported date format") -> None:
        self.value = value
        super().__init__(f"{reason}: '{value}'")


class PersistenceError(SettlepyError):
    """The row store rejected a read or write."""


class BackupNotFoundError(SettlepyError):
    """No snapshot document exists for the requested name."""
