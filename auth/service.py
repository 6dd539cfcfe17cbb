"""
auth/service.py -- Register, login, and profile workflows.

CredentialService orchestrates the policy, generator, hasher, token issuer,
store, and email transport. Each collaborator arrives through the constructor;
nothing here reads configuration or module-level state.

Ordering contracts:
  register        -- uniqueness pre-check, password generation loop, hash,
                     insert, email. The insert is never rolled back when the
                     email fails: the caller gets NotificationError carrying
                     the new id and must follow up by hand.
  login           -- resolve strategy, look up, verify. Unknown identifier
                     and wrong password raise the same error after the same
                     amount of bcrypt work.
  update_profile  -- the new password is validated before anything on the
                     user is touched, so a rejected update changes nothing.

Passwords and hashes are never logged.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import IntegrityError

from auth.errors import (
    ConflictError,
    EmailDeliveryError,
    InvalidCredentialsError,
    NotFoundError,
    NotificationError,
    PasswordConfigError,
    PolicyExhaustedError,
    PolicyViolationError,
)
from auth.lookup import resolve_login
from auth.mailer import EmailSender, build_email_sender
from auth.models import Profile, User
from auth.passwords import PasswordGenerator, PasswordHasher, PasswordPolicy
from auth.store import UserStore, now_iso
from auth.tokens import TokenIssuer
from core.config import Settings

logger = logging.getLogger("employeeauth.users")

MAX_GENERATION_ATTEMPTS = 20

PASSWORD_EMAIL_SUBJECT = "Your account password"


def _password_email_body(name: str, password: str) -> str:
    return (
        f"Hello {name},\n\n"
        "Your account has been created.\n"
        "Your temporary password is:\n\n"
        f"{password}\n\n"
        "Please log in and change it.\n"
    )


class CredentialService:
    def __init__(
        self,
        store: UserStore,
        policy: PasswordPolicy,
        generator: PasswordGenerator,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        email: EmailSender,
    ) -> None:
        self._store = store
        self._policy = policy
        self._generator = generator
        self._hasher = hasher
        self._issuer = issuer
        self._email = email

    # ------------------------------------------------------------------
    # Register
    # ------------------------------------------------------------------

    def register(self, username: str, name: str, email: str) -> str:
        """Create a user with a generated password, email it, return the id.

        Raises:
            ConflictError:        username or email already in use.
            PolicyExhaustedError: no generated password passed the policy.
            NotificationError:    user persisted, email not sent.
        """
        username = username.strip()
        name = name.strip()
        email = email.strip()
        logger.info("Creating user %s (%s)", username, email)

        if self._store.username_exists(username):
            raise ConflictError("Username already exists.")
        if self._store.email_exists(email):
            raise ConflictError("Email already exists.")

        password = self._generate_valid_password()

        stamp = now_iso()
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            name=name,
            password_hash="",
            created_at=stamp,
            updated_at=stamp,
        )
        user.password_hash = self._hasher.hash(user, password)

        try:
            self._store.create_user(user)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration for the same username/email.
            logger.warning("Insert for %s hit a uniqueness constraint", username)
            raise ConflictError("Username or email already exists.") from exc

        logger.info("User created %s. Sending email...", user.id)
        try:
            self._email.send(user.email, PASSWORD_EMAIL_SUBJECT, _password_email_body(user.name, password))
        except EmailDeliveryError as exc:
            logger.error("User %s created but password email to %s failed", user.id, user.email)
            raise NotificationError(user.id) from exc
        logger.info("Email sent to %s", user.email)

        return user.id

    def _generate_valid_password(self) -> str:
        for attempt in range(1, MAX_GENERATION_ATTEMPTS + 1):
            try:
                candidate = self._generator.generate()
            except PasswordConfigError as exc:
                logger.error("Password policy cannot be satisfied: %s", exc)
                raise PolicyExhaustedError("Failed to generate a valid password.") from exc
            result = self._policy.validate(candidate)
            if result.ok:
                return candidate
            logger.debug("Generated password rejected on attempt %d: %s", attempt, result.reason)
        logger.error("Password generation exhausted after %d attempts", MAX_GENERATION_ATTEMPTS)
        raise PolicyExhaustedError("Failed to generate a valid password.")

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, login: str, password: str) -> str:
        """Authenticate by username or email and return a signed token."""
        login = login.strip()
        lookup = resolve_login(login)
        user = lookup.find(self._store, login)

        if user is None:
            # Equalize timing -- do NOT return early before running bcrypt.
            self._hasher.verify_dummy(password)
            logger.info("Login failed (lookup=%s)", lookup.value)
            raise InvalidCredentialsError()
        if not self._hasher.verify(user, password, user.password_hash):
            logger.info("Login failed (lookup=%s)", lookup.value)
            raise InvalidCredentialsError()

        logger.info("Login succeeded for %s (lookup=%s)", user.id, lookup.value)
        return self._issuer.issue(user)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self, user_id: str) -> Profile:
        user = self._store.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return Profile(username=user.username, name=user.name, email=user.email)

    def update_profile(self, user_id: str, name: str | None, new_password: str | None = None) -> None:
        """Set the display name and optionally a new password in one update.

        Raises:
            NotFoundError:        no user with that id.
            PolicyViolationError: new_password fails the policy; nothing is saved.
        """
        logger.info("UpdateProfile started for %s", user_id)

        user = self._store.get_by_id(user_id)
        if user is None:
            logger.warning("UpdateProfile failed: user not found. user_id=%s", user_id)
            raise NotFoundError("User not found.")

        new_name = (name or "").strip()
        new_hash = None
        if new_password is not None and new_password.strip():
            result = self._policy.validate(new_password)
            if not result.ok:
                logger.warning("UpdateProfile rejected by password policy. user_id=%s reason=%s", user_id, result.reason)
                raise PolicyViolationError(result.reason)
            new_hash = self._hasher.hash(user, new_password)

        name_changed = user.name != new_name
        user.name = new_name
        if new_hash is not None:
            user.password_hash = new_hash
        user.updated_at = now_iso()

        if not self._store.update_user(user):
            raise NotFoundError("User not found.")

        logger.info(
            "UpdateProfile success for %s. name_changed=%s password_changed=%s",
            user_id,
            name_changed,
            new_hash is not None,
        )

    @property
    def token_issuer(self) -> TokenIssuer:
        return self._issuer


def build_credential_service(
    settings: Settings,
    store: UserStore,
    email: EmailSender | None = None,
) -> CredentialService:
    """Wire a CredentialService from settings loaded once at startup.

    The policy and token configuration are frozen values; every component
    gets its own reference through its constructor.
    """
    policy_config = settings.password_policy()
    return CredentialService(
        store=store,
        policy=PasswordPolicy(policy_config),
        generator=PasswordGenerator(policy_config),
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        issuer=TokenIssuer(settings.token_config()),
        email=email if email is not None else build_email_sender(settings),
    )
