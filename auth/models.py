"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and workflows
do the work; this module only owns the shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """The persisted identity.

    id is a UUID string assigned by the register workflow, never by the DB,
    so it is known before the insert and can be logged and returned even when
    the welcome email fails afterwards.

    username is immutable once created (there is no rename operation). name
    and password_hash change only through the profile update workflow, which
    also refreshes updated_at.

    password_hash is always produced by PasswordHasher. Plaintext passwords
    never reach this class.
    """

    id: str
    username: str
    email: str
    name: str
    password_hash: str
    created_at: str | None = None  # ISO 8601, UTC
    updated_at: str | None = None  # ISO 8601, UTC


@dataclass(frozen=True)
class Profile:
    """Public view of a user returned by the profile query."""

    username: str
    name: str
    email: str
