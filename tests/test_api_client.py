"""
Unit tests for API client functionality
"""

import pytest
import requests
from unittest.mock import Mock

from conftest import API, PR_API_URL, commit_item, make_response, search_item
from pr_report.api_client import GitHubAPIClient, build_search_query
from pr_report.errors import DecodeError, UpstreamError


class TestSearchQuery:
    """Test cases for the PR search query."""

    def test_query_format(self):
        assert build_search_query('alice', '2024-03-01') == 'is:pr author:alice created:2024-03-01..2024-03-01'

    def test_search_url_replaces_spaces_only(self, client):
        """Spaces become '+', everything else is left alone."""
        url = client.build_search_url('alice', '2024-03-01')
        assert url == f'{API}/search/issues?q=is:pr+author:alice+created:2024-03-01..2024-03-01'

    def test_search_url_keeps_login_characters(self, client):
        url = client.build_search_url('some-user', '2024-12-31')
        assert url.endswith('q=is:pr+author:some-user+created:2024-12-31..2024-12-31')


class TestClientConstruction:
    """Test cases for client constructors."""

    def test_basic_auth(self):
        client = GitHubAPIClient.with_basic_auth('alice', 'secret')
        assert client.session.auth == ('alice', 'secret')
        assert client.session.headers['Accept'] == 'application/vnd.github.v3+json'

    def test_bearer_token(self):
        client = GitHubAPIClient.with_bearer_token('gho_abc')
        assert client.session.headers['Authorization'] == 'Bearer gho_abc'

    def test_base_url_trailing_slash_is_stripped(self, mock_session):
        client = GitHubAPIClient(mock_session, 'https://ghe.example.com/api/v3/')
        assert client.api_base_url == 'https://ghe.example.com/api/v3'

    def test_no_retry_adapter_mounted(self):
        """Failures are never retried."""
        client = GitHubAPIClient.with_basic_auth('alice', 'secret')
        adapter = client.session.get_adapter('https://api.github.com')
        assert adapter.max_retries.total == 0


class TestSearchPullRequests:
    """Test cases for search_pull_requests."""

    def test_items_keep_api_order(self, client, mock_session):
        url = client.build_search_url('alice', '2024-03-01')
        mock_session.routes[url] = make_response(200, {
            'total_count': 3,
            'items': [search_item(3, 'Third'), search_item(1, 'First'), search_item(2, 'Second')]
        })

        prs = client.search_pull_requests('alice', '2024-03-01')

        assert [pr.number for pr in prs] == [3, 1, 2]
        assert prs[0].api_url == f'{API}/repos/x/y/pulls/3'

    def test_empty_result(self, client, mock_session):
        mock_session.routes[client.build_search_url('alice', '2024-03-01')] = make_response(
            200, {'total_count': 0, 'items': []})
        assert client.search_pull_requests('alice', '2024-03-01') == []

    def test_non_200_carries_status_and_body(self, client, mock_session):
        mock_session.routes[client.build_search_url('alice', '2024-03-01')] = make_response(
            422, {'message': 'Validation Failed'})

        with pytest.raises(UpstreamError) as exc_info:
            client.search_pull_requests('alice', '2024-03-01')

        assert exc_info.value.status_code == 422
        assert 'Validation Failed' in exc_info.value.body
        assert str(exc_info.value).startswith('failed to fetch PRs: status code 422, body: ')

    def test_missing_items_is_decode_error(self, client, mock_session):
        mock_session.routes[client.build_search_url('alice', '2024-03-01')] = make_response(200, {'total_count': 0})
        with pytest.raises(DecodeError):
            client.search_pull_requests('alice', '2024-03-01')


class TestFetchUser:
    """Test cases for fetch_user."""

    def test_fetch_user(self, client, mock_session):
        mock_session.routes[f'{API}/user'] = make_response(200, {
            'login': 'alice', 'name': 'Alice', 'avatar_url': 'https://example.com/a.png'})

        identity = client.fetch_user()

        assert identity.login == 'alice'
        assert identity.name == 'Alice'

    def test_unauthorized(self, client, mock_session):
        mock_session.routes[f'{API}/user'] = make_response(401, {'message': 'Bad credentials'})

        with pytest.raises(UpstreamError) as exc_info:
            client.fetch_user()

        assert exc_info.value.status_code == 401

    def test_invalid_json_is_decode_error(self, client, mock_session):
        mock_session.routes[f'{API}/user'] = make_response(200, text='<html>')

        with pytest.raises(DecodeError) as exc_info:
            client.fetch_user()

        assert exc_info.value.body == '<html>'

    def test_network_error_is_upstream_error(self, client, mock_session):
        mock_session.routes[f'{API}/user'] = requests.exceptions.ConnectionError("Network error")

        with pytest.raises(UpstreamError) as exc_info:
            client.fetch_user()

        assert exc_info.value.status_code is None
        assert 'Network error' in str(exc_info.value)
        assert not isinstance(exc_info.value, DecodeError)


class TestFetchCommits:
    """Test cases for fetch_commits."""

    def test_fetches_commits_sub_resource(self, client, mock_session):
        mock_session.routes[f'{PR_API_URL}/commits'] = make_response(200, [
            commit_item('abcdef1234', 'Fix bug\n\nDetails'),
            commit_item('1234567890', 'Add test')
        ])

        commits = client.fetch_commits(PR_API_URL)

        mock_session.get.assert_called_once_with(f'{PR_API_URL}/commits')
        assert [c.sha for c in commits] == ['abcdef1234', '1234567890']

    def test_not_found(self, client):
        with pytest.raises(UpstreamError) as exc_info:
            client.fetch_commits(PR_API_URL)
        assert exc_info.value.status_code == 404

    def test_non_list_is_decode_error(self, client, mock_session):
        mock_session.routes[f'{PR_API_URL}/commits'] = make_response(200, {'message': 'odd'})
        with pytest.raises(DecodeError):
            client.fetch_commits(PR_API_URL)


class TestClientLifecycle:
    """Test cases for closing the client."""

    def test_context_manager_closes_session(self):
        session = Mock()
        session.headers = {}
        with GitHubAPIClient(session) as client:
            assert client.session is session
        session.close.assert_called_once()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
