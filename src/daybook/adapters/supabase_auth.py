"""Supabase auth adapter - email/password sessions over HTTP."""

import logging
import threading
import time

import requests

from daybook.config import Config, Session, load_config
from daybook.ports.identity import Identity

logger = logging.getLogger(__name__)

# Refresh if expiring within 5 minutes
REFRESH_MARGIN = 300


class AuthenticationError(Exception):
    """Raised when authentication fails."""

    pass


class SupabaseAuthService:
    """
    Supabase GoTrue adapter.

    Implements AuthService protocol. Handles sign in/up/out and token refresh.
    No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: Session | None = None):
        self.config = config or load_config()
        self.session = session or Session.load()
        self._http = requests.Session()
        self._refresh_lock = threading.Lock()

        if not self.config.supabase_url or not self.config.supabase_anon_key:
            raise AuthenticationError(
                "Missing Supabase settings. Add SUPABASE_URL and SUPABASE_ANON_KEY to config/daybook.conf"
            )

    def _url(self, path: str) -> str:
        return f"{self.config.supabase_url}/auth/v1{path}"

    def _headers(self, with_token: bool = False) -> dict:
        headers = {"apikey": self.config.supabase_anon_key}
        if with_token:
            headers["Authorization"] = f"Bearer {self.session.access_token}"
        return headers

    def _post(self, path: str, payload: dict | None = None, with_token: bool = False) -> requests.Response:
        try:
            return self._http.post(self._url(path), json=payload or {}, headers=self._headers(with_token))
        except requests.RequestException as e:
            raise AuthenticationError(f"Auth server unreachable: {e}") from e

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        try:
            data = resp.json()
        except ValueError:
            return resp.text
        return data.get("error_description") or data.get("msg") or data.get("message") or resp.text

    def _store_session(self, data: dict) -> None:
        user = data.get("user") or {}
        self.session.access_token = data["access_token"]
        self.session.refresh_token = data.get("refresh_token", "")
        self.session.expires_at = int(time.time()) + data.get("expires_in", 3600)
        self.session.user_id = user.get("id", self.session.user_id)
        self.session.email = user.get("email", self.session.email)
        self.session.save()

    def sign_in(self, email: str, password: str) -> Identity:
        """Sign in with email and password, persisting the session."""
        resp = self._post("/token?grant_type=password", {"email": email, "password": password})
        if resp.status_code != 200:
            raise AuthenticationError(f"Login failed: {self._error_message(resp)}")

        self._store_session(resp.json())
        logger.info(f"Signed in as {self.session.email}")
        return Identity(user_id=self.session.user_id)

    def sign_up(self, email: str, password: str, full_name: str = "") -> None:
        """Register a new account with the full name as user metadata."""
        resp = self._post(
            "/signup",
            {"email": email, "password": password, "data": {"full_name": full_name}},
        )
        if resp.status_code not in (200, 201):
            raise AuthenticationError(f"Sign up failed: {self._error_message(resp)}")

        data = resp.json()
        # Projects without email confirmation return a session straight away
        if data.get("access_token"):
            self._store_session(data)

    def sign_out(self) -> None:
        """Revoke the session server-side (best effort) and forget it locally."""
        if self.session.access_token:
            resp = self._post("/logout", with_token=True)
            if resp.status_code not in (200, 204):
                logger.warning(f"Logout request failed: {self._error_message(resp)}")
        Session.clear()
        self.session = Session()

    def _refresh(self) -> None:
        """Exchange the refresh token for a new access token."""
        if not self.session.refresh_token:
            raise AuthenticationError("No refresh token. Run 'daybook login' first.")

        resp = self._post("/token?grant_type=refresh_token", {"refresh_token": self.session.refresh_token})
        if resp.status_code != 200:
            raise AuthenticationError(f"Token refresh failed: {self._error_message(resp)}")

        self._store_session(resp.json())

    def _expiring(self) -> bool:
        return bool(self.session.expires_at) and time.time() >= self.session.expires_at - REFRESH_MARGIN

    def access_token(self) -> str:
        """Valid access token, refreshed if expiring soon."""
        if not self.session.access_token:
            raise AuthenticationError("Not logged in. Run 'daybook login' first.")

        if self._expiring():
            # Fetch and save threads share one refresh token
            with self._refresh_lock:
                if self._expiring():
                    logger.debug("Access token expiring, refreshing")
                    self._refresh()
        return self.session.access_token

    def current_identity(self) -> Identity:
        """Resolve the signed-in user; signed out resolves to no user."""
        if not self.session.access_token:
            return Identity(user_id=None)
        self.access_token()
        return Identity(user_id=self.session.user_id or None)
