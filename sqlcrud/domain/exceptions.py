"""Repository exceptions.

Mutating operations translate low-level SQLAlchemy failures (and failed
existence pre-checks) into these types. The original error, when there is
one, is always available as ``__cause__``.
"""

from __future__ import annotations


class RepositoryError(RuntimeError):
    """Base class for repository failures."""


class CreateRecordError(RepositoryError):
    """Raised when an insert fails or no primary key comes back."""


class UpdateRecordError(RepositoryError):
    """Raised when an update fails or the target row does not exist."""


class DeleteRecordError(RepositoryError):
    """Raised when a delete fails or the target row(s) do not exist."""


__all__ = [
    "RepositoryError",
    "CreateRecordError",
    "UpdateRecordError",
    "DeleteRecordError",
]
