"""
HTTP client for the GamerBoy API
"""
import logging
from typing import Optional, Dict, Any, List

import requests

logger = logging.getLogger("main")


class ApiError(Exception):
    """Non-2xx response (status = HTTP code) or network failure (status = 0)"""

    def __init__(self, message: str, status: int = 0, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    @property
    def retry_after(self) -> Optional[int]:
        """Seconds to wait before retrying, for 429 responses"""
        if self.status != 429 or not isinstance(self.data, dict):
            return None
        details = self.data.get("details") or {}
        return details.get("retryAfter")


class ApiClient:
    """Client for the public catalog and ratings endpoints"""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "GamerBoy client", "Accept": "application/json"})

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"API request failed: {method} {path}: {e}")
            raise ApiError(f"Network error: {e}", status=0) from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            message = None
            if isinstance(data, dict):
                message = data.get("message") or data.get("error")
            raise ApiError(message or f"HTTP error {response.status_code}", status=response.status_code, data=data)

        if data is None:
            raise ApiError(f"Invalid JSON response from {path}", status=response.status_code)

        return data

    def get_games(self, page: int = 1, limit: int = 12, search: Optional[str] = None, categories=None) -> Dict:
        """One page of the catalog: {games, pagination}"""
        params = {"page": page, "limit": limit}
        if search:
            params["q"] = search
        if categories:
            params["categories"] = ",".join(categories)
        return self._request("GET", "/api/games", params=params)

    def get_games_by_ids(self, ids: List[int]) -> List[Dict]:
        if not ids:
            return []
        data = self._request("GET", "/api/games/by-ids", params={"ids": ",".join(str(i) for i in ids)})
        return data.get("games", [])

    def get_ratings(self, game_id: int, fingerprint: Optional[str] = None) -> Dict:
        params = {"fingerprint": fingerprint} if fingerprint else None
        return self._request("GET", f"/api/ratings/{game_id}", params=params)

    def submit_rating(self, game_id: int, rating: int, fingerprint: str) -> Dict:
        return self._request(
            "POST", f"/api/ratings/{game_id}", json={"rating": rating, "fingerprint": fingerprint}
        )
