import asyncio
import json

import pytest

from core.services.credential_store import CURRENT_USER_KEY, TOKEN_KEY, USER_KEY, CredentialStore


@pytest.mark.unit
def test_headers_without_token_have_no_authorization(memory_store):
    store = CredentialStore(memory_store)
    assert store.get_headers() == {"Content-Type": "application/json"}


@pytest.mark.unit
def test_set_get_clear_round_trip(memory_store):
    store = CredentialStore(memory_store)

    async def scenario():
        await store.set_token("abc")
        with_token = store.get_headers()
        await store.clear_token()
        return with_token, store.get_headers()

    with_token, cleared = asyncio.run(scenario())
    assert with_token["Authorization"] == "Bearer abc"
    assert "Authorization" not in cleared
    assert TOKEN_KEY not in memory_store.data


@pytest.mark.unit
def test_multipart_headers_omit_content_type(memory_store):
    store = CredentialStore(memory_store)
    asyncio.run(store.set_token("abc"))
    assert store.get_headers(json_body=False) == {"Authorization": "Bearer abc"}


@pytest.mark.unit
def test_init_loads_once_for_concurrent_callers(make_store):
    storage = make_store({TOKEN_KEY: "persisted"})
    store = CredentialStore(storage)

    async def scenario():
        await asyncio.gather(store.init(), store.init(), store.init())
        await store.init()

    asyncio.run(scenario())
    assert storage.reads == 1
    assert store.token == "persisted"


@pytest.mark.unit
def test_init_degrades_to_logged_out_on_storage_failure(make_store):
    store = CredentialStore(make_store({TOKEN_KEY: "x"}, fail_reads=True))
    asyncio.run(store.init())
    assert store.token is None
    assert store.is_authenticated is False


@pytest.mark.unit
def test_clear_is_idempotent_and_swallows_storage_errors(make_store):
    store = CredentialStore(make_store(fail_removes=True))

    async def scenario():
        await store.set_token("abc")
        await store.clear_token()
        await store.clear_token()

    asyncio.run(scenario())
    assert store.token is None


@pytest.mark.unit
def test_clear_removes_cached_profiles(memory_store):
    store = CredentialStore(memory_store)

    async def scenario():
        await store.set_token("abc")
        await store.save_user_profile({"_id": "u1", "userType": "admin"})
        await store.clear_token()

    asyncio.run(scenario())
    assert memory_store.data == {}


@pytest.mark.unit
def test_profile_snapshot_round_trip(memory_store):
    store = CredentialStore(memory_store)
    user = {"_id": "u1", "name": "Asha", "email": "asha@example.com", "userType": "superadmin", "phone": "99"}

    async def scenario():
        await store.save_user_profile(user)
        return await store.load_user_profile()

    snapshot = asyncio.run(scenario())
    assert json.loads(memory_store.data[USER_KEY]) == user
    assert json.loads(memory_store.data[CURRENT_USER_KEY]) == user
    assert snapshot.id == "u1"
    assert snapshot.user_type == "superadmin"


@pytest.mark.unit
def test_corrupt_profile_is_ignored(make_store):
    store = CredentialStore(make_store({CURRENT_USER_KEY: "{broken"}))
    assert asyncio.run(store.load_user_profile()) is None


class _GatedStore:
    """Slow storage: a read returns what was stored when it began."""

    def __init__(self, initial=None):
        self.data = dict(initial or {})
        self.started = asyncio.Event()
        self.gate = asyncio.Event()

    async def get_item(self, key):
        value = self.data.get(key)
        self.started.set()
        await self.gate.wait()
        return value

    async def set_item(self, key, value):
        self.data[key] = value

    async def remove_items(self, keys):
        for key in keys:
            self.data.pop(key, None)


@pytest.mark.unit
def test_clear_during_initial_load_is_not_undone():
    storage = _GatedStore({TOKEN_KEY: "old"})
    store = CredentialStore(storage)

    async def scenario():
        loader = asyncio.ensure_future(store.init())
        await storage.started.wait()
        await store.clear_token()
        storage.gate.set()
        await loader

    asyncio.run(scenario())
    assert store.token is None
    assert store.get_headers().get("Authorization") is None
    assert TOKEN_KEY not in storage.data


@pytest.mark.unit
def test_token_set_during_initial_load_wins_over_stored_one():
    storage = _GatedStore({TOKEN_KEY: "old"})
    store = CredentialStore(storage)

    async def scenario():
        loader = asyncio.ensure_future(store.init())
        await storage.started.wait()
        await store.set_token("fresh")
        storage.gate.set()
        await loader

    asyncio.run(scenario())
    assert store.token == "fresh"
    assert storage.data[TOKEN_KEY] == "fresh"
