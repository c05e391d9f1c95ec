"""
Identity Resolver

Produces the single current-user identifier that scopes every record
read and write.

Two identity sources exist:
1. Local accounts (email + password, hashed with a memory-hard KDF)
2. Federated sessions, materialized lazily into the same user table

DESIGN DECISION: The user table and the session snapshot live under
separate keys, and may live in separate stores. In the web UI the
session store is per browser session while the user table is shared.

Failure handling:
- A corrupted session snapshot means "logged out", never an exception
- Login failures never reveal whether the email exists
"""

from typing import Optional

import structlog
from pydantic import ValidationError
from werkzeug.security import check_password_hash, generate_password_hash

from lifeledger.audit import AuditLogger
from lifeledger.config import AuthSettings
from lifeledger.context import ChangeNotifier
from lifeledger.models.audit import AuditEventBuilder
from lifeledger.models.user import (
    FEDERATED_PASSWORD_SENTINEL,
    FEDERATED_USER_PREFIX,
    AuthResult,
    CurrentUser,
    FederatedProfile,
    User,
    new_user_id,
)
from lifeledger.services.storage import KeyValueStore, StorageError


USERS_KEY = "users"
CURRENT_USER_KEY = "current_user"

INVALID_CREDENTIALS = "Invalid email or password"

logger = structlog.get_logger(__name__)


class IdentityResolver:
    """
    Resolves, creates and switches the current user.

    Publishes the change notification after every login, logout
    and federated sync, once the session snapshot is stored.
    """

    def __init__(
        self,
        user_store: KeyValueStore,
        session_store: KeyValueStore,
        notifier: ChangeNotifier,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AuthSettings] = None,
    ):
        self._users = user_store
        self._session = session_store
        self._notifier = notifier
        self._audit = audit_logger or AuditLogger()
        self._settings = settings or AuthSettings()

    # ------------------------------------------------------------------
    # User table
    # ------------------------------------------------------------------

    def _load_users(self) -> list[User]:
        raw = self._users.read(USERS_KEY)
        if not isinstance(raw, list):
            return []

        users = []
        for item in raw:
            try:
                users.append(User.model_validate(item))
            except ValidationError:
                logger.warning("user_record_skipped", reason="malformed")
        return users

    def _save_users(self, users: list[User]) -> None:
        self._users.write(USERS_KEY, [user.model_dump(mode="json") for user in users])

    @staticmethod
    def _find_by_email(users: list[User], email: str) -> Optional[User]:
        email = email.strip().lower()
        return next((u for u in users if u.email.lower() == email), None)

    # ------------------------------------------------------------------
    # Session snapshot
    # ------------------------------------------------------------------

    def _set_current(self, user: User) -> CurrentUser:
        current = user.to_current_user()
        self._session.write(CURRENT_USER_KEY, current.model_dump(mode="json"))
        return current

    def current_user(self) -> Optional[CurrentUser]:
        """The resolved user, or None when logged out or the snapshot is unreadable."""
        try:
            raw = self._session.read(CURRENT_USER_KEY)
            if raw is None:
                return None
            return CurrentUser.model_validate(raw)
        except (ValidationError, StorageError, TypeError, ValueError) as e:
            self._audit.log(AuditEventBuilder.session_corrupted(str(e)))
            return None

    def current_user_id(self) -> Optional[str]:
        user = self.current_user()
        return user.id if user else None

    def is_authenticated(self) -> bool:
        return self.current_user() is not None

    # ------------------------------------------------------------------
    # Local accounts
    # ------------------------------------------------------------------

    def register(self, email: str, password: str, name: str) -> AuthResult:
        """
        Create a local account. Does not log the user in.
        """
        email = (email or "").strip().lower()
        name = (name or "").strip()

        if not email or not password or not name:
            return self._reject_registration(email, "All fields are required")

        if len(password) < self._settings.min_password_length:
            return self._reject_registration(
                email,
                f"Password must be at least {self._settings.min_password_length} characters",
            )

        with self._users.transaction():
            users = self._load_users()
            if self._find_by_email(users, email):
                return self._reject_registration(email, "This email is already registered")

            user = User(
                email=email,
                password_hash=generate_password_hash(
                    password, method=self._settings.password_hash_method
                ),
                name=name,
            )
            users.append(user)
            self._save_users(users)

        self._audit.log(AuditEventBuilder.user_registered(user.id, user.email))
        return AuthResult(success=True, user=user.to_current_user())

    def _reject_registration(self, email: str, reason: str) -> AuthResult:
        self._audit.log(AuditEventBuilder.registration_rejected(email, reason))
        return AuthResult(success=False, error=reason)

    def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials and make the user current."""
        if not email or not password:
            return AuthResult(success=False, error="Email and password are required")

        user = self._find_by_email(self._load_users(), email)

        if (
            user is None
            or user.password_hash == FEDERATED_PASSWORD_SENTINEL
            or not check_password_hash(user.password_hash, password)
        ):
            self._audit.log(AuditEventBuilder.login_failed(email.strip().lower()))
            return AuthResult(success=False, error=INVALID_CREDENTIALS)

        current = self._set_current(user)
        self._audit.log(AuditEventBuilder.login_succeeded(user.id))
        self._notifier.publish()
        return AuthResult(success=True, user=current)

    def logout(self) -> None:
        user_id = self.current_user_id()
        self._session.remove(CURRENT_USER_KEY)
        self._audit.log(AuditEventBuilder.logged_out(user_id))
        self._notifier.publish()

    # ------------------------------------------------------------------
    # Federated sessions
    # ------------------------------------------------------------------

    def sync_federated_session(self, profile: FederatedProfile) -> CurrentUser:
        """
        Upsert the local user for a federated profile and make it current.

        Matches by lowercased email. The display name follows upstream.
        """
        email = profile.email.strip().lower()
        created = False

        with self._users.transaction():
            users = self._load_users()
            user = self._find_by_email(users, email)

            if user is None:
                user = User(
                    id=new_user_id(FEDERATED_USER_PREFIX),
                    email=email,
                    password_hash=FEDERATED_PASSWORD_SENTINEL,
                    name=profile.name,
                )
                users.append(user)
                self._save_users(users)
                created = True
            elif user.name != profile.name:
                user.name = profile.name
                self._save_users(users)

        current = self._set_current(user)
        self._audit.log(AuditEventBuilder.federated_session_synced(user.id, created))
        self._notifier.publish()
        return current
