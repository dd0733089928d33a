"""GitHub API client for the searches and lookups behind a PR report."""

import logging
from typing import List, Optional

import requests

from .errors import DecodeError, UpstreamError
from .models import AuthenticatedIdentity, CommitRecord, PullRequestSummary

DEFAULT_API_URL = 'https://api.github.com'
ACCEPT_HEADER = 'application/vnd.github.v3+json'


def build_search_query(login: str, date: str) -> str:
    """Build the issue search query for PRs a user opened on a single day.

    The created range is inclusive on both ends, so ``date..date`` covers the
    whole calendar day.
    """
    return f"is:pr author:{login} created:{date}..{date}"


class GitHubAPIClient:
    """Issues authenticated requests against the GitHub REST and Search APIs.

    The client never retries and sets no timeout: a failed call fails the
    current unit of work and a hanging call blocks it.
    """

    def __init__(self, session: requests.Session, api_base_url: str = DEFAULT_API_URL):
        """Initialize the GitHub API client.

        Args:
            session: A requests session that already carries the caller's credentials
            api_base_url: Base URL of the GitHub REST API
        """
        self.session = session
        self.api_base_url = api_base_url.rstrip('/')
        self.session.headers.update({'Accept': ACCEPT_HEADER})

    @classmethod
    def with_basic_auth(cls, username: str, token: str, api_base_url: str = DEFAULT_API_URL) -> 'GitHubAPIClient':
        """Create a client authenticating with a username and personal access token."""
        session = requests.Session()
        session.auth = (username, token)
        logging.info(f"Initialized GitHub API client with basic auth for '{username}'")
        return cls(session, api_base_url)

    @classmethod
    def with_bearer_token(cls, token: str, api_base_url: str = DEFAULT_API_URL) -> 'GitHubAPIClient':
        """Create a client authenticating with a bearer token."""
        session = requests.Session()
        session.headers.update({'Authorization': f'Bearer {token}'})
        logging.info("Initialized GitHub API client with bearer token")
        return cls(session, api_base_url)

    def build_search_url(self, login: str, date: str) -> str:
        query = build_search_query(login, date).replace(' ', '+')
        return f"{self.api_base_url}/search/issues?q={query}"

    def get_json(self, url: str, context: str):
        """GET a URL and decode the JSON body.

        Args:
            url: Absolute API URL
            context: Short description used as prefix of error messages

        Returns:
            The decoded JSON document

        Raises:
            UpstreamError: On transport failure or a non-200 status
            DecodeError: If the body is not valid JSON
        """
        logging.debug(f"GET {url}")
        try:
            response = self.session.get(url)
        except requests.RequestException as e:
            raise UpstreamError(f"{context}: {e}") from e

        if response.status_code != 200:
            logging.debug(f"GET {url} returned {response.status_code}")
            raise UpstreamError.from_response(context, response)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"{context}: invalid JSON: {e}", status_code=response.status_code,
                              body=response.text) from e

    def search_pull_requests(self, login: str, date: str) -> List[PullRequestSummary]:
        """Find the PRs a user opened on the given day, in search result order.

        Only the first page of results is read.
        """
        data = self.get_json(self.build_search_url(login, date), 'failed to fetch PRs')
        if not isinstance(data, dict) or not isinstance(data.get('items'), list):
            raise DecodeError("failed to decode search results: missing 'items'")
        results = [PullRequestSummary.from_api(item) for item in data['items']]
        logging.debug(f"Search returned {len(results)} PR(s) for {login} on {date}")
        return results

    def fetch_user(self) -> AuthenticatedIdentity:
        """Fetch the user the credentials belong to."""
        data = self.get_json(f"{self.api_base_url}/user", 'failed to get user')
        return AuthenticatedIdentity.from_api(data)

    def fetch_commits(self, pr_api_url: str) -> List[CommitRecord]:
        """Fetch the commits of a PR given its API URL."""
        data = self.get_json(f"{pr_api_url}/commits", 'request failed')
        if not isinstance(data, list):
            raise DecodeError("failed to decode commits: expected a list")
        return [CommitRecord.from_api(item) for item in data]

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> 'GitHubAPIClient':
        return self

    def __exit__(self, *exc_info) -> Optional[bool]:
        self.close()
        return None
