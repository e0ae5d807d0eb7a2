"""
Hosted backend (Supabase) access.

One client is created per request and kept on `g`. When a user is signed in
the client carries their access token, so writes run under their identity
instead of the anonymous key.
"""

from typing import Any, Callable, Dict, List, Optional

import httpx
from flask import Flask, current_app, g
from supabase import Client, ClientOptions, PostgrestAPIError, create_client

from exceptions import BackendError, ConfigurationError

ClientFactory = Callable[..., Client]


def server_client_options() -> ClientOptions:
    """
    Options for every server-side client.

    Clients live for one request or one sign-in call, so nothing may keep a
    session around or schedule a token refresh on a background timer.
    """
    return ClientOptions(auto_refresh_token=False, persist_session=False)


class Backend:
    """Flask extension wrapping the Supabase client."""

    def __init__(self, app: Optional[Flask] = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask, client_factory: Optional[ClientFactory] = None) -> None:
        app.extensions["backend"] = self
        app.extensions["backend.client_factory"] = client_factory or create_client
        app.teardown_appcontext(self._drop_client)

    # -------------------
    # Clients
    # -------------------
    def new_client(self) -> Client:
        """Fresh, unauthenticated client."""
        url = current_app.config.get("SUPABASE_URL")
        key = current_app.config.get("SUPABASE_ANON_KEY")
        if not url or not key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_ANON_KEY must be set.")

        factory = current_app.extensions["backend.client_factory"]
        return factory(url, key, options=server_client_options())

    @property
    def client(self) -> Client:
        """Client for the current request."""
        if "supabase_client" not in g:
            client = self.new_client()
            auth_session = g.get("auth_session")
            if auth_session is not None:
                client.postgrest.auth(auth_session.access_token)
            g.supabase_client = client
        return g.supabase_client

    def table(self, name: str):
        return self.client.table(name)

    @staticmethod
    def _drop_client(exc=None) -> None:
        g.pop("supabase_client", None)

    # -------------------
    # Request execution
    # -------------------
    def execute(self, request) -> List[Dict[str, Any]]:
        """
        Run a query builder and return its rows.

        Library errors come out as `BackendError`; callers never see
        postgrest or httpx exceptions.
        """
        try:
            response = request.execute()
        except PostgrestAPIError as exc:
            raise BackendError(
                exc.message or "The data service rejected the request.",
                code=exc.code,
            ) from exc
        except httpx.HTTPError as exc:
            raise BackendError(f"Could not reach the data service: {exc}") from exc

        if response is None:
            return []
        data = response.data
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)
