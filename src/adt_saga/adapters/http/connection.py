"""HTTP adapter – HttpxAdtConnection: a stateful ADT session over httpx."""
from __future__ import annotations

import uuid
from http.cookies import CookieError, SimpleCookie
from typing import Any

import httpx

from adt_saga.kernel.errors import TransportError
from adt_saga.kernel.types.session import SessionState
from adt_saga.observability.logging import get_logger, mask_token

logger = get_logger(__name__)

DISCOVERY_PATH = "/sap/bc/adt/core/discovery"

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
_CSRF_PLACEHOLDERS = frozenset({"fetch", "required"})


def _parse_cookie_header(header: str | None) -> dict[str, str]:
    """Split a ``Cookie`` header (``a=1; b=2``) into a name → value dict."""
    store: dict[str, str] = {}
    for part in (header or "").split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name:
            store[name] = value
    return store


class HttpxAdtConnection:
    """Async connection that keeps one server session across requests.

    The server ties a lock to the session that took it. This class owns the
    session identity: the ``sap-adt-connection-id`` header, the cookie store
    and the CSRF token. It can hand them out as a :class:`SessionState` and
    take them back later, possibly in another process.

    Every request carries a fresh ``sap-adt-request-id``. Stateful mode adds
    ``x-sap-adt-sessiontype: stateful``. Cookies are sent from the store only;
    ``Set-Cookie`` answers are merged back into it.
    """

    def __init__(
        self,
        base_url: str,
        *,
        username: str | None = None,
        password: str | None = None,
        client: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        auth = httpx.BasicAuth(username, password or "") if username else None
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=auth,
            params={"sap-client": client} if client else None,
            timeout=timeout,
            transport=transport,
        )
        self._session_id: str | None = None
        self._stateful = False
        self._cookie_store: dict[str, str] = {}
        self._csrf_token: str | None = None

    @classmethod
    def from_settings(cls, settings: Any, **kwargs: Any) -> HttpxAdtConnection:
        """Build from an :class:`~adt_saga.config.AdtSettings`."""
        return cls(
            settings.url,
            username=settings.username,
            password=settings.password,
            client=settings.client,
            timeout=settings.timeout_seconds,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Session accessors
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def stateful(self) -> bool:
        return self._stateful

    def set_session_id(self, session_id: str | None) -> None:
        self._session_id = session_id

    def set_session_type(self, stateful: bool) -> None:
        self._stateful = stateful

    def get_session_state(self) -> SessionState | None:
        if not self._cookie_store and not self._csrf_token:
            return None
        return SessionState(
            cookies=self._cookie_header(),
            csrf_token=self._csrf_token,
            cookie_store=dict(self._cookie_store),
        )

    def set_session_state(self, state: SessionState | None) -> None:
        if state is None:
            self._cookie_store = {}
            self._csrf_token = None
            return
        self._cookie_store = dict(state.cookie_store) or _parse_cookie_header(state.cookies)
        self._csrf_token = state.csrf_token

    def _cookie_header(self) -> str | None:
        if not self._cookie_store:
            return None
        return "; ".join(f"{name}={value}" for name, value in self._cookie_store.items())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open a server session: fetch a CSRF token and the session cookies."""
        await self.request("GET", DISCOVERY_PATH, headers={"x-csrf-token": "Fetch"})
        if self._csrf_token is None:
            raise TransportError("Server did not return a CSRF token")
        logger.debug("connection.opened", session_id=mask_token(self._session_id))

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> HttpxAdtConnection:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _headers(self, method: str, extra: dict[str, str] | None) -> dict[str, str]:
        headers: dict[str, str] = {"sap-adt-request-id": uuid.uuid4().hex}
        if self._session_id:
            headers["sap-adt-connection-id"] = self._session_id
        if self._stateful:
            headers["x-sap-adt-sessiontype"] = "stateful"
        if self._csrf_token and method not in _SAFE_METHODS:
            headers["x-csrf-token"] = self._csrf_token
        cookie = self._cookie_header()
        if cookie:
            headers["Cookie"] = cookie
        headers.update(extra or {})
        return headers

    def _capture(self, response: httpx.Response) -> None:
        for raw in response.headers.get_list("set-cookie"):
            jar: SimpleCookie = SimpleCookie()
            try:
                jar.load(raw)
            except CookieError:
                logger.debug("connection.cookie_unparsed")
                continue
            for name, morsel in jar.items():
                self._cookie_store[name] = morsel.value
        token = response.headers.get("x-csrf-token")
        if token and token.lower() not in _CSRF_PLACEHOLDERS:
            self._csrf_token = token

    async def request(
        self,
        method: str,
        path: str,
        *,
        content: str | bytes | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request on the current session; non-2xx raises :class:`TransportError`."""
        method = method.upper()
        try:
            response = await self._http.request(
                method,
                path,
                content=content,
                headers=self._headers(method, headers),
                params=params,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request timed out: {method} {path}", cause=exc) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request failed: {method} {path}: {exc}", cause=exc) from exc
        finally:
            self._http.cookies.clear()

        self._capture(response)
        if response.is_error:
            raise TransportError(
                f"HTTP {response.status_code} from {method} {path}",
                status_code=response.status_code,
                raw_body=response.text,
            )
        return response


__all__ = ["DISCOVERY_PATH", "HttpxAdtConnection"]
