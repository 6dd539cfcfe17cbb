"""
auth/passwords.py -- Password policy, generation, and hashing.

Security design decisions:
  Policy: a pure validator over PasswordPolicyConfig. Rules run in a fixed
       order and the first failing rule supplies the reason. The only
       character-class rule is the count of configured special characters.

  Generation: every draw and every shuffle index comes from the `secrets`
       module (OS CSPRNG). The generator builds the password to satisfy the
       policy by construction; the register workflow still re-validates.

  Hashing: bcrypt over a SHA-256 pre-hash. bcrypt only reads 72 bytes of
       input (and bcrypt >= 5 raises instead of truncating), while the policy
       has no upper length bound. Pre-hashing to a fixed 44-byte base64 digest
       keeps every password inside that window. The stored string is
       "bcrypt_sha256$<bcrypt hash>" -- the bcrypt part already embeds cost
       and salt, so verification needs nothing else.

  Timing: verify_dummy() runs a full bcrypt check against a throwaway hash.
       Login calls it when no user matches so the unknown-user path costs the
       same as the wrong-password path.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string
from dataclasses import dataclass

import bcrypt

from auth.errors import PasswordConfigError
from auth.models import User
from core.config import PasswordPolicyConfig

# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PolicyResult:
    ok: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.ok


class PasswordPolicy:
    """Validates candidate passwords against a PasswordPolicyConfig."""

    def __init__(self, config: PasswordPolicyConfig) -> None:
        self._config = config

    @property
    def config(self) -> PasswordPolicyConfig:
        return self._config

    def validate(self, candidate: str | None) -> PolicyResult:
        """Check `candidate` rule by rule; the first failure wins."""
        cfg = self._config
        if candidate is None or not candidate.strip():
            return PolicyResult(False, "Password is required.")

        if len(candidate) < cfg.min_length:
            return PolicyResult(False, f"Password must be at least {cfg.min_length} characters long.")

        allowed = cfg.allowed_special_chars or ""
        special_count = sum(1 for ch in candidate if ch in allowed)
        if special_count < cfg.min_special_chars:
            return PolicyResult(
                False,
                f"Password must contain at least {cfg.min_special_chars} special character(s) from: {allowed}",
            )

        return PolicyResult(True)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

_LETTERS = string.ascii_lowercase + string.ascii_uppercase
_ALPHANUMERIC = _LETTERS + string.digits

# Floor applied on top of the configured minimum length.
_MIN_GENERATED_LENGTH = 6


class PasswordGenerator:
    """Builds random passwords that satisfy the configured policy."""

    def __init__(self, config: PasswordPolicyConfig) -> None:
        self._config = config

    def generate(self) -> str:
        """Return a fresh password.

        Layout before shuffling: exactly `min_special_chars` specials, then
        letters/digits up to max(min_length, 6). The Fisher-Yates pass
        scatters the specials so they are not clustered at the front.

        Raises PasswordConfigError if specials are required but none are
        allowed.
        """
        min_len = max(self._config.min_length, _MIN_GENERATED_LENGTH)
        min_special = max(self._config.min_special_chars, 0)
        specials = self._config.allowed_special_chars or ""
        if min_special > 0 and not specials:
            raise PasswordConfigError("allowed_special_chars is empty but min_special_chars > 0.")

        chars = [secrets.choice(specials) for _ in range(min_special)]
        while len(chars) < min_len:
            chars.append(secrets.choice(_ALPHANUMERIC))

        _shuffle(chars)
        return "".join(chars)


def _shuffle(items: list[str]) -> None:
    """Unbiased in-place Fisher-Yates shuffle driven by the CSPRNG."""
    for i in range(len(items) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        items[i], items[j] = items[j], items[i]


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------

_SCHEME = "bcrypt_sha256"


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8", errors="surrogatepass")).digest())


class PasswordHasher:
    """Salted bcrypt hashing with constant-time verification.

    The user argument is accepted so a hash can be bound to its identity in
    the future; the current scheme only needs the per-hash salt.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds
        # Computed once so the first unknown-user login is not measurably
        # slower than later ones.
        self._dummy_hash = self._hash("employeeauth_timing_dummy")

    def _hash(self, password: str) -> str:
        digest = bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=self._rounds))
        return f"{_SCHEME}${digest.decode('ascii')}"

    def hash(self, user: User | None, password: str) -> str:
        """Return the encoded hash of `password`."""
        return self._hash(password)

    def verify(self, user: User | None, password: str, stored_hash: str) -> bool:
        """Return True if `password` matches `stored_hash`.

        Malformed or foreign-scheme hashes return False rather than raising;
        the login path treats them as a wrong password.
        """
        scheme, sep, bcrypt_hash = (stored_hash or "").partition("$")
        if scheme != _SCHEME or not sep:
            return False
        try:
            return bcrypt.checkpw(_prehash(password), bcrypt_hash.encode("ascii"))
        except ValueError:
            return False

    def verify_dummy(self, password: str) -> None:
        """Burn one verification's worth of time. Result is discarded."""
        self.verify(None, password, self._dummy_hash)
