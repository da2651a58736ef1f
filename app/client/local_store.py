"""
Per-install client state: favorites, recently played games and the rating
fingerprint, persisted as one JSON document.
"""
import hashlib
import json
import locale
import logging
import os
import platform
import time

from constants import FAVORITES_KEY, RECENTLY_PLAYED_KEY, FINGERPRINT_KEY, MAX_RECENTLY_PLAYED
from utils import safe_write_json, to_base36

logger = logging.getLogger("main")


class LocalStore:
    """JSON file key/value store. Missing or corrupt data reads as empty."""

    def __init__(self, path):
        self.path = path

    def _read(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable local store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key, default=None):
        return self._read().get(key, default)

    def set(self, key, value):
        data = self._read()
        data[key] = value
        safe_write_json(self.path, data)

    def remove(self, key):
        data = self._read()
        if key in data:
            del data[key]
            safe_write_json(self.path, data)


def _valid_id(value):
    return isinstance(value, int) and not isinstance(value, bool)


class Favorites:
    """Favorite game ids, in the order they were added"""

    def __init__(self, store: LocalStore):
        self.store = store

    def ids(self):
        stored = self.store.get(FAVORITES_KEY, [])
        if not isinstance(stored, list):
            return []
        return [game_id for game_id in stored if _valid_id(game_id)]

    def contains(self, game_id):
        return game_id in self.ids()

    def add(self, game_id):
        ids = self.ids()
        if game_id not in ids:
            ids.append(game_id)
            self.store.set(FAVORITES_KEY, ids)

    def remove(self, game_id):
        self.store.set(FAVORITES_KEY, [i for i in self.ids() if i != game_id])

    def toggle(self, game_id):
        """Flip membership; returns True when the game is now a favorite"""
        if self.contains(game_id):
            self.remove(game_id)
            return False
        self.add(game_id)
        return True


class RecentlyPlayed:
    """Most recently played games, newest first, capped at MAX_RECENTLY_PLAYED"""

    def __init__(self, store: LocalStore, max_items=MAX_RECENTLY_PLAYED):
        self.store = store
        self.max_items = max_items

    def entries(self):
        stored = self.store.get(RECENTLY_PLAYED_KEY, [])
        if not isinstance(stored, list):
            return []
        entries = [
            entry for entry in stored
            if isinstance(entry, dict) and _valid_id(entry.get("id")) and isinstance(entry.get("timestamp"), (int, float))
        ]
        return sorted(entries, key=lambda entry: entry["timestamp"], reverse=True)

    def ids(self):
        return [entry["id"] for entry in self.entries()]

    def add(self, game_id, timestamp=None):
        """Record a play; replaying a game moves it to the front"""
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        entries = [entry for entry in self.entries() if entry["id"] != game_id]
        entries.insert(0, {"id": game_id, "timestamp": timestamp})
        self.store.set(RECENTLY_PLAYED_KEY, entries[: self.max_items])

    def remove(self, game_id):
        self.store.set(RECENTLY_PLAYED_KEY, [e for e in self.entries() if e["id"] != game_id])

    def clear(self):
        self.store.set(RECENTLY_PLAYED_KEY, [])


def host_attributes():
    """Coarse, non-identifying attributes of this install"""
    return [
        platform.system(),
        platform.release(),
        platform.machine(),
        locale.getlocale()[0] or "",
        str(time.timezone),
    ]


def generate_fingerprint(attributes):
    digest = hashlib.sha256("|".join(str(a) for a in attributes).encode("utf-8")).digest()
    return to_base36(int.from_bytes(digest[:8], "big"))


def get_fingerprint(store: LocalStore, attributes=None):
    """Stable opaque id of this install, generated once and persisted"""
    fingerprint = store.get(FINGERPRINT_KEY)
    if isinstance(fingerprint, str) and fingerprint:
        return fingerprint

    fingerprint = generate_fingerprint(attributes if attributes is not None else host_attributes())
    store.set(FINGERPRINT_KEY, fingerprint)
    return fingerprint
