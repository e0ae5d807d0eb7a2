"""
Sign-in state for the portal.

`AuthContext` is created once in the app factory. Each request gets the
signed-in user's session (or None) on `g.auth_session`, loaded from the signed
Flask cookie. Other parts of the app can `subscribe` to sign-in / sign-out
events instead of reaching into a global.
"""

import time
from dataclasses import asdict, dataclass
from functools import wraps
from typing import Callable, List, Optional

import httpx
from flask import Flask, current_app, flash, g, redirect, session, url_for
from supabase import AuthError

from exceptions import AuthenticationError
from models import backend

SESSION_KEY = "auth_session"

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

Listener = Callable[[str, Optional["AuthSession"]], None]


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str
    user_id: str
    email: str
    expires_at: Optional[int] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) >= self.expires_at

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AuthSession":
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or "",
            user_id=str(data.get("user_id") or ""),
            email=data.get("email") or "",
            expires_at=data.get("expires_at"),
        )


class AuthContext:
    """Flask extension owning the current session and its listeners."""

    def __init__(self, app: Optional[Flask] = None):
        self._listeners: List[Listener] = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        app.extensions["auth"] = self
        app.before_request(self._load_session)

        @app.context_processor
        def inject_current_session():
            return {"current_session": self.current}

    # -------------------
    # Subscriptions
    # -------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the returned callable unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, auth_session: Optional[AuthSession]) -> None:
        for listener in list(self._listeners):
            listener(event, auth_session)

    # -------------------
    # Session
    # -------------------
    @property
    def current(self) -> Optional[AuthSession]:
        return g.get("auth_session")

    def _load_session(self) -> None:
        data = session.get(SESSION_KEY)
        auth_session = AuthSession.from_dict(data) if data else None

        if auth_session is not None and auth_session.is_expired():
            # No silent refresh: an expired session means signing in again
            session.pop(SESSION_KEY, None)
            auth_session = None

        g.auth_session = auth_session

    def _store(self, auth_session: Optional[AuthSession]) -> None:
        if auth_session is None:
            session.pop(SESSION_KEY, None)
        else:
            session[SESSION_KEY] = auth_session.to_dict()
        g.auth_session = auth_session
        # Drop the request client so the next query picks up the new identity
        g.pop("supabase_client", None)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Password sign-in against the hosted auth service."""
        client = backend.new_client()
        try:
            response = client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise AuthenticationError(
                getattr(exc, "message", None) or str(exc),
                code=getattr(exc, "code", None),
            ) from exc
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Could not reach the auth service: {exc}") from exc

        if response is None or response.session is None:
            raise AuthenticationError("Sign-in did not return a session.")

        user = response.user or response.session.user
        auth_session = AuthSession(
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            user_id=str(user.id) if user else "",
            email=(user.email if user else None) or email,
            expires_at=response.session.expires_at,
        )
        self._store(auth_session)
        self._notify(SIGNED_IN, auth_session)
        return auth_session

    def sign_out(self) -> None:
        """Revoke the token (best effort) and always clear the local session."""
        auth_session = self.current
        if auth_session is not None:
            try:
                backend.new_client().auth.admin.sign_out(auth_session.access_token)
            except (AuthError, httpx.HTTPError) as exc:
                current_app.logger.warning("Token revocation failed: %s", exc)

        self._store(None)
        self._notify(SIGNED_OUT, auth_session)


def get_auth() -> AuthContext:
    return current_app.extensions["auth"]


def login_required(view_func):
    """
    Decorator for pages that need a signed-in user.
    Without a session it redirects to /login.
    """

    @wraps(view_func)
    def wrapped_view(*args, **kwargs):
        if g.get("auth_session") is None:
            flash("Please sign in to continue.", "info")
            return redirect(url_for("auth.login"))

        return view_func(*args, **kwargs)

    return wrapped_view
