"""JSON key-value persistence for the prompt vault and session keys."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from echomind_workbench.models import EnhancedPrompt, VaultEntry

LOGGER = logging.getLogger("echomind_workbench.persistence")

VAULT_KEY = "promptVault"
LAST_USER_KEY = "lastUser"
VAULT_LIMIT = 50


class KeyValueStore:
    """Small local-storage style store backed by one JSON object file.

    A missing or unreadable file reads as an empty store; the next write
    replaces it.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read_all(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("store_read_failed path=%s error=%s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("store_read_failed path=%s error=root is not an object", self.path)
            return {}
        return payload

    def _write_all(self, payload: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=True) + "\n", encoding="utf-8")

    def get(self, key: str, default: object = None) -> object:
        return self._read_all().get(key, default)

    def set(self, key: str, value: object) -> None:
        payload = self._read_all()
        payload[key] = value
        self._write_all(payload)

    def remove(self, key: str) -> None:
        payload = self._read_all()
        if payload.pop(key, None) is not None:
            self._write_all(payload)


def _deserialize_meta(payload: object) -> EnhancedPrompt | None:
    if not isinstance(payload, dict):
        return None
    meta_prompt = payload.get("metaPrompt")
    reasoning = payload.get("reasoning", [])
    if not isinstance(meta_prompt, str) or not isinstance(reasoning, list):
        return None
    return EnhancedPrompt(meta_prompt=meta_prompt, reasoning=tuple(str(item) for item in reasoning))


def _deserialize_entry(payload: object) -> VaultEntry | None:
    if not isinstance(payload, dict):
        return None
    meta = _deserialize_meta(payload.get("meta"))
    if meta is None:
        return None
    ts = payload.get("ts", 0)
    if isinstance(ts, bool) or not isinstance(ts, (int, float)):
        return None
    return VaultEntry(ts=int(ts), raw=str(payload.get("raw", "")), meta=meta)


def load_vault(store: KeyValueStore) -> list[VaultEntry]:
    """Load vault entries, skipping legacy or malformed records."""
    raw_entries = store.get(VAULT_KEY, [])
    if not isinstance(raw_entries, list):
        return []

    entries: list[VaultEntry] = []
    for item in raw_entries:
        entry = _deserialize_entry(item)
        if entry is None:
            LOGGER.debug("vault_entry_skipped reason=malformed")
            continue
        entries.append(entry)
    return entries


def append_vault_entry(
    vault: list[VaultEntry],
    entry: VaultEntry,
    *,
    limit: int = VAULT_LIMIT,
) -> list[VaultEntry]:
    """Return a new vault list with `entry` first, capped at `limit` entries."""
    return [entry, *vault][:limit]


def save_vault(store: KeyValueStore, entries: list[VaultEntry]) -> None:
    store.set(VAULT_KEY, [entry.to_payload() for entry in entries])
