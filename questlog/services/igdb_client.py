"""
Client for the IGDB v4 API (authenticated through Twitch app-access tokens)
"""
import json
import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from questlog.constants import IGDB_BASE_URL, TWITCH_TOKEN_URL
from questlog.exceptions import IGDBAuthException, IGDBQueryException
from questlog.metrics import UpstreamCallTracker

logger = logging.getLogger("main")

_DEFAULT_TIMEOUT = 10  # seconds


def _response_body(response) -> Any:
    """Parsed JSON body when possible, raw text otherwise"""
    try:
        return response.json()
    except ValueError:
        return response.text


def _describe(body: Any) -> str:
    if isinstance(body, str):
        return body
    return json.dumps(body)


class IGDBClient:
    """Client for IGDB API (via Twitch)

    The access token is kept in ``token_cache`` (a :class:`CatalogCache`), so
    every client sharing that cache shares the token.
    """

    def __init__(self, client_id: str, client_secret: str, token_cache, timeout: int = _DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_cache = token_cache
        self.timeout = timeout
        self.session = session or requests.Session()
        self._token_lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def get_access_token(self) -> str:
        """Get or refresh OAuth2 access token"""
        token = self.token_cache.get_token()
        if token:
            return token

        with self._token_lock:
            # Another thread may have refreshed while we waited
            token = self.token_cache.get_token()
            if token:
                return token

            with UpstreamCallTracker("token") as call:
                try:
                    response = self.session.post(
                        TWITCH_TOKEN_URL,
                        data={
                            "client_id": self.client_id,
                            "client_secret": self.client_secret,
                            "grant_type": "client_credentials",
                        },
                        timeout=self.timeout,
                    )
                except requests.RequestException as e:
                    logger.error(f"IGDB auth failed: {e}")
                    raise IGDBAuthException(f"Token request failed: {e}") from e
                call.status = response.status_code

            body = _response_body(response)
            if not response.ok:
                raise IGDBAuthException(f"Token request failed: {_describe(body)}", body=body,
                                        status=response.status_code)

            token = body.get("access_token") if isinstance(body, dict) else None
            if not token:
                raise IGDBAuthException(f"Token request failed: {_describe(body)}", body=body,
                                        status=response.status_code)

            expires_in = body.get("expires_in") or 0
            self.token_cache.store_token(token, expires_in)
            logger.debug(f"Obtained new Twitch access token (expires in {expires_in}s)")
            return token

    def query(self, query_lines: List[str], endpoint: str = "games") -> List[Dict[str, Any]]:
        """Run one Apicalypse query and return the decoded records"""
        token = self.get_access_token()
        headers = {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {token}",
            "Content-Type": "text/plain",
        }
        body_text = "\n".join(query_lines)

        with UpstreamCallTracker("query") as call:
            try:
                response = self.session.post(
                    f"{IGDB_BASE_URL}/{endpoint}",
                    headers=headers,
                    data=body_text,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                logger.error(f"IGDB query error: {e}")
                raise IGDBQueryException(f"IGDB query failed: {e}") from e
            call.status = response.status_code

        body = _response_body(response)
        if not response.ok:
            raise IGDBQueryException(f"IGDB query failed: {_describe(body)}", body=body,
                                     status=response.status_code)

        return body if isinstance(body, list) else []
