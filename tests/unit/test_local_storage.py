import asyncio

import pytest

from adapters.local_storage import FileKeyValueStore
from core.domain.errors import StorageError
from core.interfaces.storage import KeyValueStore
from core.services.credential_store import CredentialStore


@pytest.mark.unit
def test_file_store_satisfies_protocol(tmp_path):
    assert isinstance(FileKeyValueStore(tmp_path / "s.json"), KeyValueStore)


@pytest.mark.unit
def test_set_get_remove(tmp_path):
    store = FileKeyValueStore(tmp_path / "nested" / "s.json")

    async def scenario():
        missing = await store.get_item("token")
        await store.set_item("token", "abc")
        await store.set_item("user", '{"_id": "u1"}')
        present = await store.get_item("token")
        await store.remove_items(["token", "user", "currentUser"])
        return missing, present, await store.get_item("token")

    missing, present, removed = asyncio.run(scenario())
    assert (missing, present, removed) == (None, "abc", None)
    assert not list(store.path.parent.glob(".storage-*.tmp"))


@pytest.mark.unit
def test_remove_on_missing_file_is_noop(tmp_path):
    store = FileKeyValueStore(tmp_path / "s.json")
    asyncio.run(store.remove_items(["token"]))
    assert not store.path.exists()


@pytest.mark.unit
def test_corrupt_file_raises_storage_error(tmp_path):
    path = tmp_path / "s.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        asyncio.run(FileKeyValueStore(path).get_item("token"))


@pytest.mark.unit
def test_corrupt_file_means_logged_out(tmp_path):
    path = tmp_path / "s.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    credentials = CredentialStore(FileKeyValueStore(path))

    asyncio.run(credentials.init())

    assert credentials.token is None
    assert "Authorization" not in credentials.get_headers()


@pytest.mark.unit
def test_token_survives_restart(tmp_path):
    path = tmp_path / "s.json"
    asyncio.run(CredentialStore(FileKeyValueStore(path)).set_token("persisted"))

    reloaded = CredentialStore(FileKeyValueStore(path))
    asyncio.run(reloaded.init())

    assert reloaded.get_headers()["Authorization"] == "Bearer persisted"
