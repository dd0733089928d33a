"""Shared fixtures for PR report tests."""

import json

import pytest
from unittest.mock import Mock

from pr_report.api_client import GitHubAPIClient

API = 'https://api.github.com'
PR_API_URL = f'{API}/repos/x/y/pulls/1'


def make_response(status_code=200, json_data=None, text=None):
    """Build a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    if text is None:
        text = json.dumps(json_data) if json_data is not None else ''
    response.text = text
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    return response


def search_item(number, title, owner='x', repo='y'):
    """A search/issues item as returned by GitHub."""
    return {
        'title': title,
        'html_url': f'https://github.com/{owner}/{repo}/pull/{number}',
        'number': number,
        'pull_request': {'url': f'{API}/repos/{owner}/{repo}/pulls/{number}'}
    }


def commit_item(sha, message):
    return {'sha': sha, 'commit': {'message': message}}


@pytest.fixture
def mock_session():
    """A requests session whose GET responses are routed by URL."""
    session = Mock()
    session.headers = {}
    session.routes = {}

    def get(url, *args, **kwargs):
        if url not in session.routes:
            return make_response(404, {'message': 'Not Found'})
        route = session.routes[url]
        if isinstance(route, Exception):
            raise route
        return route

    session.get = Mock(side_effect=get)
    return session


@pytest.fixture
def client(mock_session):
    """GitHub client on top of the routed mock session."""
    return GitHubAPIClient(mock_session, API)
