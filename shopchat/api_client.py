"""HTTP client for the shop backend (auth, products, chat history)."""

import threading
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from shopchat.config import get_api_url
from shopchat.logger import get_logger
from shopchat.models import UserId

logger = get_logger()


class ApiClient:
    """
    Thin wrapper around the shop backend's JSON API.

    Every method issues exactly one request and returns the decoded JSON
    body as-is. Status codes are not inspected, so an error response with a
    JSON body comes back like any other; callers look at its `success`
    field. Transport errors and non-JSON bodies propagate as
    `requests.RequestException` (including `requests.JSONDecodeError`).
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. http://localhost:5000/api (defaults to SHOPCHAT_API_URL)
            session: Optional requests session, shared by every thread that uses this client
        """
        self.base_url = (base_url or get_api_url()).rstrip("/")
        self._shared_session = session
        self._local = threading.local()

    @property
    def http(self) -> requests.Session:
        """HTTP session for the calling thread; requests sessions are not thread-safe."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug(f"GET {path} params={params}")
        response = self.http.get(self._url(path), params=params)
        return response.json()

    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        logger.debug(f"POST {path}")
        response = self.http.post(self._url(path), json=payload)
        return response.json()

    # Auth

    def register(self, username: str, password: str) -> Any:
        """Create an account. Response: {success, message?}."""
        return self._post("/auth/register", {"username": username, "password": password})

    def login(self, username: str, password: str) -> Any:
        """Log in. Response: {success, user_id, message?}."""
        return self._post("/auth/login", {"username": username, "password": password})

    # Products

    def search_products(self, query: Optional[str] = None, category: Optional[str] = None) -> Any:
        """
        Search the catalog.

        Args:
            query: Free-text search term, sent as `search` when non-empty
            category: Category filter, sent when non-empty

        Returns:
            List of products ({name, price, stock, ...})
        """
        params = {}
        if query:
            params["search"] = query
        if category:
            params["category"] = category
        return self._get("/products", params=params)

    def get_products_by_category(self, category: str) -> Any:
        return self._get(f"/products/category/{quote(str(category), safe='')}")

    def search_products_by_price_range(self, min_price: float, max_price: float) -> Any:
        return self._get("/products/price-range", params={"min_price": min_price, "max_price": max_price})

    def get_recommended_products(self) -> Any:
        return self._get("/products/recommended")

    # Chat history

    def save_chat_message(self, user_id: UserId, content: str, type: str) -> Any:
        """Persist one chat message; `type` is "user" or "bot"."""
        return self._post("/chat/message", {"user_id": user_id, "content": content, "type": type})

    def get_chat_history(self, user_id: UserId) -> Any:
        """Fetch a user's messages as a list of {type, content, timestamp}."""
        return self._get("/chat/history", params={"user_id": user_id})
