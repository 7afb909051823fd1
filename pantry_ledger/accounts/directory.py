"""
Account Directory

Maps usernames to exactly one Account and one UserStore, and tracks which
account is logged in. Secrets are compared as opaque strings.
"""

import random
from typing import Optional, Sequence

from pantry_ledger.audit import AuditLogger
from pantry_ledger.catalog import DEFAULT_CATALOG
from pantry_ledger.config import AppSettings, get_settings
from pantry_ledger.errors import (
    AlreadyExistsError,
    InvalidCredentialError,
    InvalidInputError,
    NotFoundError,
)
from pantry_ledger.models.audit import AuditEventType
from pantry_ledger.models.inventory import AppData, InventoryItem, Product
from pantry_ledger.models.store import Account, UserStore
from pantry_ledger.state import AppState


AVATAR_TAGS = ("blue", "emerald", "purple", "orange", "rose")


class AccountDirectory:
    """Registration, login and per-account store lifecycle."""

    def __init__(
        self,
        state: AppState,
        catalog: Sequence[Product] = DEFAULT_CATALOG,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._catalog = tuple(catalog)
        self._settings = settings or get_settings().app
        self._audit_logger = audit_logger or state.audit_logger

    @property
    def _accounts(self) -> dict[str, Account]:
        return self._state.global_state.accounts

    def accounts(self) -> list[Account]:
        """All accounts, for an account picker."""
        return list(self._accounts.values())

    def current_account(self) -> Optional[Account]:
        username = self._state.current_user
        return self._accounts.get(username) if username else None

    def seed_store(self) -> UserStore:
        """A fresh UserStore with every catalog product at zero stock."""
        inventory = {
            product.id: InventoryItem.from_product(product, threshold=self._settings.default_threshold)
            for product in self._catalog
        }
        return UserStore(
            current=AppData(
                inventory=inventory,
                transactions=[],
                exchange_rate=self._settings.default_exchange_rate,
            ),
            history=[],
            version_counter=0,
        )

    def register(self, username: str, secret: str, display_name: str) -> Account:
        """
        Create an account with a catalog-seeded store and log it in.

        Raises:
            AlreadyExistsError: If username is taken
            InvalidInputError: If username is blank
        """
        if not username or not username.strip():
            raise InvalidInputError("Username must not be blank")
        if username in self._accounts:
            raise AlreadyExistsError(f"Account already exists: {username}")

        account = Account(
            username=username,
            credential_secret=secret,
            display_name=display_name,
            avatar_tag=random.choice(AVATAR_TAGS),
        )
        global_state = self._state.global_state
        global_state.accounts[username] = account
        global_state.user_stores[username] = self.seed_store()
        global_state.current_user = username

        self._audit_logger.log_account_event(
            username, AuditEventType.ACCOUNT_REGISTERED, f"Account registered: {display_name}"
        )
        self._state.save()
        return account

    def login(self, username: str, secret: str) -> Account:
        """
        Start a session.

        Raises:
            InvalidCredentialError: If no account matches username and secret exactly
        """
        account = self._accounts.get(username)
        if account is None or account.credential_secret != secret:
            self._audit_logger.log_account_event(
                username, AuditEventType.LOGIN_FAILED, "Login rejected"
            )
            raise InvalidCredentialError("Invalid username or secret")

        global_state = self._state.global_state
        if username not in global_state.user_stores:
            # an account without a store is repaired with a fresh one
            global_state.user_stores[username] = self.seed_store()
        global_state.current_user = username

        self._audit_logger.log_account_event(
            username, AuditEventType.LOGIN_SUCCEEDED, "Logged in"
        )
        self._state.save()
        return account

    def logout(self) -> None:
        """End the session. The account and its store stay persisted."""
        username = self._state.current_user
        self._state.global_state.current_user = None
        if username:
            self._audit_logger.log_account_event(
                username, AuditEventType.LOGGED_OUT, "Logged out"
            )
        self._state.save()

    def delete_account(self, username: str, secret: str) -> None:
        """
        Remove an account and its whole store, snapshots included.

        Raises:
            NotFoundError: If the account does not exist
            InvalidCredentialError: If the secret does not match
        """
        account = self._accounts.get(username)
        if account is None:
            raise NotFoundError(f"Unknown account: {username}")
        if account.credential_secret != secret:
            raise InvalidCredentialError("Invalid username or secret")

        global_state = self._state.global_state
        del global_state.accounts[username]
        global_state.user_stores.pop(username, None)
        if global_state.current_user == username:
            global_state.current_user = None

        self._audit_logger.log_account_event(
            username, AuditEventType.ACCOUNT_DELETED, "Account deleted"
        )
        self._state.save()
