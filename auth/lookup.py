"""
auth/lookup.py -- Login identifier resolution.

A login string is either a username or an email address. The choice is a
pure predicate on the string (does it contain "@"), so the two strategies are
members of one enum rather than classes behind a registry.

Lookups are exact and case-sensitive, as stored. No normalisation beyond the
trim the caller already applied.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore


class LoginLookup(str, Enum):
    USERNAME = "username"
    EMAIL = "email"

    def find(self, store: UserStore, login: str) -> User | None:
        if self is LoginLookup.EMAIL:
            return store.get_by_email(login)
        return store.get_by_username(login)


def resolve_login(login: str) -> LoginLookup:
    """Pick the lookup strategy for a raw login string."""
    return LoginLookup.EMAIL if "@" in login.strip() else LoginLookup.USERNAME
