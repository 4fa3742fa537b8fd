import logging
import threading
from urllib.parse import quote, urlencode

import requests
from pydantic import ValidationError as PydanticValidationError

from mediatree.core.errors import (
    ERRORS_BY_STATUS, AccessDenied, MediaTreeError, TransientIOError,
)
from mediatree.models.entry import BrowseQuery, DirectoryListing, SearchResponse, VideoInfo
from mediatree.models.library import Favorite, Playlist, Token

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

UNEXPECTED_RESPONSE = "Unexpected response from backend"


def error_for(response: requests.Response) -> MediaTreeError:
    """
    Map an error response back onto the shared error taxonomy.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = None
    message = payload.get("error") if isinstance(payload, dict) else None
    message = message or response.reason or f"HTTP {response.status_code}"

    if response.status_code == 401:
        return AccessDenied(message)
    if response.status_code >= 500:
        return TransientIOError(message)
    return ERRORS_BY_STATUS.get(response.status_code, MediaTreeError)(message)


def parse(model, data, many: bool = False):
    """
    Validate a response body into model (a list of them when many is set).
    A body of the wrong shape is a backend fault, not a user error.
    """
    try:
        if many:
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            return [model.model_validate(item) for item in data]
        return model.model_validate(data)
    except (PydanticValidationError, TypeError) as e:
        logger.warning("Unexpected %s payload from backend: %s", model.__name__, e)
        raise TransientIOError(UNEXPECTED_RESPONSE) from e


class MediaTreeClient:
    """
    Blocking HTTP client for the media tree backend.

    Requests may run on several worker threads at once, and requests.Session
    is not thread-safe, so each thread gets its own session unless one is
    passed in explicitly.
    """

    def __init__(self, base_url: str, token: str | None = None, timeout: float = 10.0,
                 session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{API_PREFIX}{path}"
        try:
            response = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning("Backend request %s %s failed: %s", method, path, e)
            raise TransientIOError("Backend unreachable") from e

        if response.status_code >= 400:
            raise error_for(response)
        try:
            return response.json()
        except ValueError as e:
            # Proxy or captive portal pages arrive as 200 HTML
            logger.warning("Backend request %s %s returned a non-JSON body", method, path)
            raise TransientIOError(UNEXPECTED_RESPONSE) from e

    def login(self, password: str) -> str:
        data = self._request("POST", "/auth/token", data={"username": "viewer", "password": password})
        self.token = parse(Token, data).access_token
        return self.token

    def browse(self, query: BrowseQuery) -> DirectoryListing:
        params = {
            "path": query.path,
            "search": query.search_term,
            "sortBy": query.sort_by,
            "sortOrder": query.sort_order,
            "filterType": query.filter_type,
        }
        return parse(DirectoryListing, self._request("GET", "/files/browse", params=params))

    def search(self, term: str, filter_type: str = "all") -> SearchResponse:
        params = {"q": term, "type": filter_type}
        return parse(SearchResponse, self._request("GET", "/files/search", params=params))

    def video_info(self, path: str) -> VideoInfo:
        return parse(VideoInfo, self._request("GET", "/files/video-info", params={"path": path}))

    def playlists(self) -> list[Playlist]:
        return parse(Playlist, self._request("GET", "/library/playlists"), many=True)

    def favorites(self) -> list[Favorite]:
        return parse(Favorite, self._request("GET", "/library/favorites"), many=True)

    def video_url(self, path: str) -> str:
        """
        Streaming URL for a video. The token travels in the query string
        because a video element cannot send headers.
        """
        url = f"{self.base_url}/videos/{quote(path)}"
        if self.token:
            url += "?" + urlencode({"token": self.token})
        return url
