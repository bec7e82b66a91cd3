"""Credential storage backed by the freedesktop Secret Service.

Items are addressed only by attribute search on ``{service, key}``; the
Secret Service has no native upsert, so ``store`` searches first and then
either updates the match in place or creates a new item. The two steps are
not atomic: a concurrent writer in another process can slip in between and
leave a duplicate, which ``delete`` cleans up by removing every match.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Protocol

import secretstorage
from jeepney.wrappers import DBusErrorResponse
from secretstorage.exceptions import SecretStorageException

from vibeproxy.core.constants import (
    ATTR_KEY,
    ATTR_SERVICE,
    SECRET_CONTENT_TYPE,
    SECRET_ENCODING,
    SECRET_SERVICE_NAME,
)
from vibeproxy.core.exceptions import (
    EncodingError,
    SecretServiceConnectionError,
    StoreError,
    UnlockError,
)

logger = logging.getLogger(__name__)

# Errors the secret service may raise for any D-Bus call
SERVICE_ERRORS = (SecretStorageException, DBusErrorResponse)


class SecretItem(Protocol):
    """The item operations the store relies on."""

    def get_attributes(self) -> dict[str, str]: ...

    def get_secret(self) -> bytes: ...

    def set_secret(self, secret: bytes, content_type: str = ...) -> None: ...

    def delete(self) -> None: ...


class SecretCollection(Protocol):
    """The collection operations the store relies on."""

    def is_locked(self) -> bool: ...

    def unlock(self) -> bool: ...

    def search_items(self, attributes: dict[str, str]) -> Iterable[SecretItem]: ...

    def create_item(
        self,
        label: str,
        attributes: dict[str, str],
        secret: bytes,
        replace: bool = ...,
        content_type: str = ...,
    ) -> SecretItem: ...


@dataclass(frozen=True)
class Secret:
    """A named credential scoped to one service."""

    service: str
    key: str
    value: bytes

    @property
    def label(self) -> str:
        """Display label shown by keyring managers."""
        return f"{self.service}/{self.key}"

    @property
    def attributes(self) -> dict[str, str]:
        """Search attributes identifying this secret."""
        return {ATTR_SERVICE: self.service, ATTR_KEY: self.key}


class SecretStore:
    """Stores application secrets in the default Secret Service collection."""

    def __init__(
        self,
        collection: SecretCollection,
        service: str = SECRET_SERVICE_NAME,
        connection: Any = None,
    ) -> None:
        """
        Initialize secret store around an already unlocked collection.

        Args:
            collection: Secret Service collection to operate on
            service: Value of the ``service`` attribute scoping all items
            connection: D-Bus connection owned by this store, closed on close()
        """
        self._collection = collection
        self._service = service
        self._connection = connection

    @classmethod
    def connect(cls, service: str = SECRET_SERVICE_NAME) -> "SecretStore":
        """
        Connect to the Secret Service and open the default collection.

        This may block on an interactive unlock prompt.

        Raises:
            SecretServiceConnectionError: If the service is unreachable
            UnlockError: If the collection stays locked
        """
        logger.info("Initializing keyring")

        try:
            connection = secretstorage.dbus_init()
        except SERVICE_ERRORS as e:
            raise SecretServiceConnectionError(
                f"Failed to connect to secret service: {e}",
                operation="connect",
            ) from e

        try:
            collection = secretstorage.get_default_collection(connection)
        except SERVICE_ERRORS as e:
            connection.close()
            raise SecretServiceConnectionError(
                f"Failed to get default collection: {e}",
                operation="connect",
            ) from e

        try:
            locked = collection.is_locked()
        except SERVICE_ERRORS as e:
            logger.warning(f"Could not query collection lock state: {e}")
            locked = False

        if locked:
            try:
                dismissed = collection.unlock()
            except SERVICE_ERRORS as e:
                connection.close()
                raise UnlockError(
                    f"Failed to unlock keyring collection: {e}",
                    operation="unlock",
                ) from e
            if dismissed:
                connection.close()
                raise UnlockError(
                    "Unlock prompt was dismissed",
                    operation="unlock",
                )

        logger.info("Keyring initialized successfully")
        return cls(collection, service=service, connection=connection)

    @property
    def service(self) -> str:
        """Get the service attribute scoping this store."""
        return self._service

    def close(self) -> None:
        """Close the owned D-Bus connection, if any."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "SecretStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _attributes(self, key: str) -> dict[str, str]:
        return {ATTR_SERVICE: self._service, ATTR_KEY: key}

    def _search(self, attributes: dict[str, str]) -> list[SecretItem]:
        # search_items is lazy; materialize so failures surface here
        return list(self._collection.search_items(attributes))

    def store(self, key: str, value: str | bytes) -> None:
        """
        Store a secret, updating the existing item for ``key`` if present.

        If the search itself fails the item is created unconditionally,
        which may leave a duplicate behind.

        Raises:
            StoreError: If the item cannot be updated or created
        """
        logger.info(f"Storing secret: {key}")

        payload = value.encode(SECRET_ENCODING) if isinstance(value, str) else value
        secret = Secret(service=self._service, key=key, value=payload)

        try:
            items = self._search(secret.attributes)
        except SERVICE_ERRORS as e:
            logger.warning(f"Search failed, creating new item: {e}")
            items = []

        if items:
            item = items[-1]
            try:
                item.set_secret(secret.value, SECRET_CONTENT_TYPE)
            except SERVICE_ERRORS as e:
                raise StoreError(
                    f"Failed to update secret: {e}", key=key, operation="update"
                ) from e
            logger.info(f"Updated existing secret: {key}")
            return

        try:
            self._collection.create_item(
                secret.label,
                secret.attributes,
                secret.value,
                replace=True,
                content_type=SECRET_CONTENT_TYPE,
            )
        except SERVICE_ERRORS as e:
            raise StoreError(
                f"Failed to create secret: {e}", key=key, operation="create"
            ) from e
        logger.info(f"Created new secret: {key}")

    def retrieve(self, key: str) -> str | None:
        """
        Retrieve a secret as text.

        Returns None when no item matches or the search fails.

        Raises:
            StoreError: If a matching item's payload cannot be read
            EncodingError: If the payload is not valid UTF-8
        """
        logger.info(f"Retrieving secret: {key}")

        try:
            items = self._search(self._attributes(key))
        except SERVICE_ERRORS as e:
            logger.error(f"Failed to search for secret: {e}")
            return None

        if not items:
            logger.info(f"Secret not found: {key}")
            return None

        try:
            payload = items[-1].get_secret()
        except SERVICE_ERRORS as e:
            raise StoreError(
                f"Failed to get secret: {e}", key=key, operation="retrieve"
            ) from e

        try:
            value = bytes(payload).decode(SECRET_ENCODING)
        except UnicodeDecodeError as e:
            raise EncodingError(
                f"Secret is not valid {SECRET_ENCODING}",
                key=key,
                encoding=SECRET_ENCODING,
            ) from e

        logger.info(f"Retrieved secret: {key}")
        return value

    def delete(self, key: str) -> None:
        """
        Delete every item stored under ``key``.

        Deleting a missing key is a no-op. A failed search is logged and
        treated as nothing to delete.

        Raises:
            StoreError: If a matching item cannot be deleted
        """
        logger.info(f"Deleting secret: {key}")

        try:
            items = self._search(self._attributes(key))
        except SERVICE_ERRORS as e:
            logger.warning(f"Failed to search for secret to delete: {e}")
            return

        for item in items:
            try:
                item.delete()
            except SERVICE_ERRORS as e:
                raise StoreError(
                    f"Failed to delete secret: {e}", key=key, operation="delete"
                ) from e

        logger.info(f"Deleted secret: {key} ({len(items)} item(s))")

    def list_keys(self) -> set[str]:
        """List the keys of all secrets stored for this service."""
        try:
            items = self._search({ATTR_SERVICE: self._service})
        except SERVICE_ERRORS as e:
            logger.error(f"Failed to list keys: {e}")
            return set()

        keys: set[str] = set()
        for item in items:
            try:
                attributes = item.get_attributes()
            except SERVICE_ERRORS as e:
                logger.debug(f"Skipping item with unreadable attributes: {e}")
                continue
            key = attributes.get(ATTR_KEY)
            if key is not None:
                keys.add(key)
        return keys
