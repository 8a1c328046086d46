"""Secure credential storage helpers for the pastebin-agent CLI.

Responsibilities:
- Persist the developer API key and the session user key in an OS-backed
  secure credential store.
- Provide deterministic read/write/delete operations for both secrets.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for credential persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType

import keyring
from keyring.backends import fail


_DEFAULT_SERVICE_NAME = "pastebin-agent"
_API_KEY_ACCOUNT = "api_dev_key"
_USER_KEY_ACCOUNT = "api_user_key"


class CredentialStore:
    """Interface for secure credential operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_api_key(self) -> str | None:
        raise NotImplementedError

    def set_api_key(self, api_key: str) -> None:
        raise NotImplementedError

    def clear_api_key(self) -> bool:
        """Delete a stored API key and return whether one existed."""

        raise NotImplementedError

    def get_user_key(self) -> str | None:
        raise NotImplementedError

    def set_user_key(self, user_key: str) -> None:
        raise NotImplementedError

    def clear_user_key(self) -> bool:
        """Delete a stored user key and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def _load_keyring_module(self) -> ModuleType:
        """Return the keyring module used for storage operations."""

        return keyring

    def is_available(self) -> bool:
        """Return `False` when keyring resolved to its fail-only backend."""

        backend = self._load_keyring_module().get_keyring()
        return not isinstance(backend, fail.Keyring)

    def get_api_key(self) -> str | None:
        """Get the normalized developer key, returning `None` when missing."""

        return self._get_secret(_API_KEY_ACCOUNT)

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized developer key."""

        self._set_secret(_API_KEY_ACCOUNT, api_key, label="API key")

    def clear_api_key(self) -> bool:
        """Remove the stored developer key and report if one was present."""

        return self._clear_secret(_API_KEY_ACCOUNT)

    def get_user_key(self) -> str | None:
        """Get the normalized session user key, returning `None` when missing."""

        return self._get_secret(_USER_KEY_ACCOUNT)

    def set_user_key(self, user_key: str) -> None:
        """Persist a normalized session user key."""

        self._set_secret(_USER_KEY_ACCOUNT, user_key, label="User key")

    def clear_user_key(self) -> bool:
        """Remove the stored session user key and report if one was present."""

        return self._clear_secret(_USER_KEY_ACCOUNT)

    def _get_secret(self, account_name: str) -> str | None:
        value = self._load_keyring_module().get_password(self.service_name, account_name)
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        return normalized

    def _set_secret(self, account_name: str, value: str, *, label: str) -> None:
        normalized = value.strip()
        if not normalized:
            raise ValueError(f"{label} must be a non-empty string.")
        self._load_keyring_module().set_password(self.service_name, account_name, normalized)

    def _clear_secret(self, account_name: str) -> bool:
        if self._get_secret(account_name) is None:
            return False
        self._load_keyring_module().delete_password(self.service_name, account_name)
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
