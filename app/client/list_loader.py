"""
Cached game lists backed by locally stored ids (favorites, recently played)
"""
import logging
import threading

from client.api_client import ApiError

logger = logging.getLogger("main")


class GameListLoader:
    """
    Fetches the games for a list of local ids and keeps them in the order of
    those ids. The result is cached until invalidate(); subscribers are
    notified whenever the cached data or error changes.
    """

    def __init__(self, api, source_ids, name="games"):
        self.api = api
        self.source_ids = source_ids
        self.name = name
        self._data = None
        self._error = None
        self._lock = threading.RLock()
        self._subscribers = []

    @property
    def data(self):
        return self._data

    @property
    def error(self):
        return self._error

    def subscribe(self, callback):
        """Register a change callback; returns a function that unsubscribes it"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self):
        for callback in list(self._subscribers):
            callback()

    def load(self):
        """Cached games, fetching them on first use"""
        with self._lock:
            if self._data is not None:
                return self._data

            ids = list(self.source_ids())
            try:
                games = self.api.get_games_by_ids(ids) if ids else []
            except ApiError as e:
                logger.error(f"Error fetching {self.name}: {e}")
                self._error = e
                self._notify()
                raise

            by_id = {game["id"]: game for game in games}
            self._data = [by_id[game_id] for game_id in ids if game_id in by_id]
            self._error = None

        self._notify()
        return self._data

    def invalidate(self):
        with self._lock:
            self._data = None
            self._error = None
        self._notify()

    def refresh(self):
        """Drop the cache and load again (e.g. when the view becomes visible)"""
        self.invalidate()
        return self.load()


def favorites_loader(api, favorites):
    return GameListLoader(api, favorites.ids, name="favorites")


def recently_played_loader(api, recently_played):
    return GameListLoader(api, recently_played.ids, name="recently played")
