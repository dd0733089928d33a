"""GitHub OAuth login flow and per-request credential handling."""

import base64
import logging
import secrets
from typing import Any, Dict, Optional, Tuple

import requests
from authlib.integrations.base_client import OAuthError
from authlib.integrations.requests_client import OAuth2Session

from .api_client import DEFAULT_API_URL, GitHubAPIClient
from .errors import UnauthorizedError
from .sessions import generate_token

AUTHORIZE_URL = 'https://github.com/login/oauth/authorize'
ACCESS_TOKEN_URL = 'https://github.com/login/oauth/access_token'
DEFAULT_SCOPES = ('read:user', 'user:email')

STATE_COOKIE = 'oauthstate'
STATE_COOKIE_MAX_AGE = 10 * 60
SESSION_COOKIE = 'session_id'
SESSION_COOKIE_MAX_AGE = 24 * 60 * 60


def states_match(cookie_state: Optional[str], query_state: Optional[str]) -> bool:
    """Check the OAuth state cookie against the state query parameter.

    Only an exact match of two non-empty values is accepted.
    """
    if not cookie_state or not query_state:
        return False
    return secrets.compare_digest(cookie_state.encode(), query_state.encode())


def parse_authorization_header(value: Optional[str]) -> Optional[Tuple[str, Any]]:
    """Parse an Authorization header into credentials.

    Returns:
        ('bearer', token), ('basic', (username, token)) or None when the header
        is absent or uses another scheme

    Raises:
        UnauthorizedError: If a basic or bearer header is malformed
    """
    if not value:
        return None
    scheme, _, credentials = value.strip().partition(' ')
    scheme = scheme.lower()
    credentials = credentials.strip()

    if scheme in ('bearer', 'token'):
        if not credentials:
            raise UnauthorizedError("unauthorized: empty bearer token")
        return 'bearer', credentials

    if scheme == 'basic':
        try:
            decoded = base64.b64decode(credentials, validate=True).decode('utf-8')
        except ValueError as e:
            raise UnauthorizedError("unauthorized: malformed basic credentials") from e
        username, sep, token = decoded.partition(':')
        if not sep or not username or not token:
            raise UnauthorizedError("unauthorized: malformed basic credentials")
        return 'basic', (username, token)

    return None


def client_for_credentials(credentials: Tuple[str, Any], api_base_url: str = DEFAULT_API_URL) -> GitHubAPIClient:
    """Build a client for credentials returned by ``parse_authorization_header``."""
    kind, value = credentials
    if kind == 'basic':
        username, token = value
        return GitHubAPIClient.with_basic_auth(username, token, api_base_url)
    return GitHubAPIClient.with_bearer_token(value, api_base_url)


class OAuthGateway:
    """Authorization-code flow against GitHub's OAuth endpoints."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes=DEFAULT_SCOPES,
        api_base_url: str = DEFAULT_API_URL
    ):
        """Initialize the gateway.

        Args:
            client_id: OAuth app client ID
            client_secret: OAuth app client secret
            redirect_uri: Callback URL registered with the OAuth app
            scopes: Requested scopes
            api_base_url: Base URL of the GitHub REST API
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self.api_base_url = api_base_url

        if not client_id or not client_secret:
            logging.warning("GITHUB_CLIENT_ID or GITHUB_CLIENT_SECRET is not set. OAuth login will fail.")

    def _oauth_session(self, token: Dict[str, Any] = None) -> OAuth2Session:
        return OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=self.scopes,
            redirect_uri=self.redirect_uri,
            token=token
        )

    def new_state(self) -> str:
        return generate_token()

    def authorization_url(self, state: str) -> str:
        """Return the provider URL the browser is sent to for login."""
        with self._oauth_session() as session:
            url, _ = session.create_authorization_url(AUTHORIZE_URL, state=state)
        return url

    def exchange_code(self, code: Optional[str]) -> Dict[str, Any]:
        """Exchange an authorization code for an access token.

        Raises:
            UnauthorizedError: If the code is missing or the exchange fails
        """
        if not code:
            raise UnauthorizedError("unauthorized: missing authorization code")
        try:
            with self._oauth_session() as session:
                token = session.fetch_token(ACCESS_TOKEN_URL, code=code)
        except (OAuthError, requests.RequestException, ValueError) as e:
            raise UnauthorizedError(f"token exchange failed: {e}") from e
        return dict(token)

    def client_for_token(self, token: Dict[str, Any]) -> GitHubAPIClient:
        """Build a GitHub client whose requests carry the OAuth token."""
        return GitHubAPIClient(self._oauth_session(token), self.api_base_url)
