"""Bearer-token lifecycle.

The store owns the single credential of the process:
- absent at cold start, loaded lazily (at most once) from device storage;
- written only by `set_token` (login/registration flows);
- cleared on logout or when the backend reports the session as invalid.

A corrupt or unavailable storage degrades to the logged-out state: load and
clear failures are logged, never raised to the caller.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from core.domain.errors import StorageError
from core.domain.models import UserSnapshot, snapshot_from_payload
from core.interfaces.storage import KeyValueStore
from core.log import get_logger

TOKEN_KEY = "token"
USER_KEY = "user"
CURRENT_USER_KEY = "currentUser"
SESSION_KEYS = [TOKEN_KEY, USER_KEY, CURRENT_USER_KEY]

_log = get_logger("credentials")


class CredentialStore:
    def __init__(self, storage: KeyValueStore) -> None:
        self._storage = storage
        self._token: str | None = None
        self._init_task: asyncio.Task[None] | None = None
        # Bumped by every set/clear; a load that raced one of them is stale.
        self._generation = 0

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    async def init(self) -> None:
        """Load the persisted token once; concurrent callers share the same load."""

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._load())
        await asyncio.shield(self._init_task)

    async def _load(self) -> None:
        generation = self._generation
        try:
            stored = await self._storage.get_item(TOKEN_KEY)
        except (StorageError, OSError, ValueError) as exc:
            _log.warning("Could not read token from storage, continuing logged out: %s", exc)
            stored = None
        if self._generation == generation:
            self._token = stored or None

    async def set_token(self, token: str) -> None:
        self._generation += 1
        self._token = token
        await self._storage.set_item(TOKEN_KEY, token)

    async def clear_token(self) -> None:
        """Forget the credential and the cached profile. Safe to call repeatedly."""

        self._generation += 1
        self._token = None
        try:
            await self._storage.remove_items(SESSION_KEYS)
        except (StorageError, OSError) as exc:
            _log.warning("Could not clear persisted session: %s", exc)

    def get_headers(self, *, json_body: bool = True) -> dict[str, str]:
        headers: dict[str, str] = {}
        if json_body:
            headers["Content-Type"] = "application/json"
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def save_user_profile(self, user: Any) -> None:
        """Persist the profile returned by a successful authentication."""

        payload = json.dumps(user, ensure_ascii=False)
        await self._storage.set_item(USER_KEY, payload)
        await self._storage.set_item(CURRENT_USER_KEY, payload)

    async def save_current_user(self, user: Any) -> None:
        await self._storage.set_item(CURRENT_USER_KEY, json.dumps(user, ensure_ascii=False))

    async def load_user_profile(self) -> UserSnapshot | None:
        try:
            raw = await self._storage.get_item(CURRENT_USER_KEY)
        except (StorageError, OSError) as exc:
            _log.warning("Could not read cached profile: %s", exc)
            return None
        if not raw:
            return None
        try:
            return snapshot_from_payload(json.loads(raw))
        except ValueError:
            _log.warning("Cached profile is not valid JSON, ignoring it")
            return None
