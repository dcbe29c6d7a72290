"""Device-local storage contract.

Why Protocol:
- A structural contract (duck typing) without rigid inheritance.
- The credential store can run on a JSON file, an in-memory dict in tests or a
  platform keychain without knowing which.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal async string key/value store.

    Design rules:
    - Every method is async because real backends do I/O.
    - Failures raise `core.domain.errors.StorageError`.
    - `remove_items` ignores keys that are not present.
    """

    async def get_item(self, key: str) -> str | None:
        ...

    async def set_item(self, key: str, value: str) -> None:
        ...

    async def remove_items(self, keys: list[str]) -> None:
        ...
