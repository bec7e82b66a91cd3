"""Pytest configuration and fixtures for VibeProxy tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator, Iterator

import pytest
from secretstorage.exceptions import SecretStorageException

from vibeproxy.backend.models import BackendStatus, Health
from vibeproxy.core.config import BackendConfig, ConfigStore
from vibeproxy.core.exceptions import BackendRequestError
from vibeproxy.credentials.store import SecretStore


class FakeItem:
    """In-memory stand-in for a Secret Service item."""

    def __init__(
        self,
        collection: "FakeCollection",
        label: str,
        attributes: dict[str, str],
        secret: bytes,
        content_type: str = "text/plain",
    ) -> None:
        self.collection = collection
        self.label = label
        self.attributes = dict(attributes)
        self.secret = secret
        self.content_type = content_type
        self.fail_attributes = False
        self.fail_delete = False
        self.fail_get = False

    def get_attributes(self) -> dict[str, str]:
        if self.fail_attributes:
            raise SecretStorageException("attributes unavailable")
        return dict(self.attributes)

    def get_secret(self) -> bytes:
        if self.fail_get:
            raise SecretStorageException("item is locked")
        return self.secret

    def set_secret(self, secret: bytes, content_type: str = "text/plain") -> None:
        self.secret = secret
        self.content_type = content_type
        self.collection.updates += 1

    def delete(self) -> None:
        if self.fail_delete:
            raise SecretStorageException("delete refused")
        self.collection.items.remove(self)


class FakeCollection:
    """In-memory stand-in for a Secret Service collection."""

    def __init__(self) -> None:
        self.items: list[FakeItem] = []
        self.locked = False
        self.dismiss_unlock = False
        self.fail_search = False
        self.fail_create = False
        self.creates = 0
        self.updates = 0

    def is_locked(self) -> bool:
        return self.locked

    def unlock(self) -> bool:
        if self.dismiss_unlock:
            return True
        self.locked = False
        return False

    def search_items(self, attributes: dict[str, str]) -> Iterator[FakeItem]:
        if self.fail_search:
            raise SecretStorageException("search failed")
        for item in list(self.items):
            if all(item.attributes.get(k) == v for k, v in attributes.items()):
                yield item

    def create_item(
        self,
        label: str,
        attributes: dict[str, str],
        secret: bytes,
        replace: bool = False,
        content_type: str = "text/plain",
    ) -> FakeItem:
        if self.fail_create:
            raise SecretStorageException("create refused")
        self.creates += 1
        item = FakeItem(self, label, attributes, secret, content_type)
        self.items.append(item)
        return item

    def add(self, attributes: dict[str, str], secret: bytes, label: str = "") -> FakeItem:
        """Seed an item without going through the store."""
        item = FakeItem(self, label, attributes, secret)
        self.items.append(item)
        return item


class StubBackend:
    """Health probe returning a fixed result or raising a fixed error."""

    def __init__(
        self, result: Health | Exception, status: BackendStatus | None = None
    ) -> None:
        self.result = result
        self.status = status
        self.calls = 0
        self.configs: list[BackendConfig] = []

    def factory(self, config: BackendConfig, timeout: float | None = None) -> "StubBackend":
        self.configs.append(config)
        return self

    async def health_check(self) -> Health:
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    async def get_status(self) -> BackendStatus:
        if self.status is None:
            raise BackendRequestError("no status report", status_code=404)
        return self.status


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def config_dir(temp_dir: Path) -> Path:
    """Directory holding the config file."""
    return temp_dir / "vibeproxy"


@pytest.fixture
def config_store(config_dir: Path) -> ConfigStore:
    """Create config store rooted in a temporary directory."""
    return ConfigStore(config_dir)


@pytest.fixture
def collection() -> FakeCollection:
    """Create an empty, unlocked fake collection."""
    return FakeCollection()


@pytest.fixture
def secret_store(collection: FakeCollection) -> SecretStore:
    """Create secret store over the fake collection."""
    return SecretStore(collection)


@pytest.fixture
def healthy_backend() -> StubBackend:
    """Backend that answers healthy with 12 ms latency."""
    return StubBackend(Health(healthy=True, latency_ms=12, message="ok"))
