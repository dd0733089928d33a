"""Data models for GitHub PR reports."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from .errors import DecodeError


def _require(data: Dict, key: str, kind: str) -> Any:
    """Read a required key from a decoded API payload."""
    if not isinstance(data, dict) or key not in data:
        raise DecodeError(f"failed to decode {kind}: missing '{key}'")
    return data[key]


@dataclass
class AuthenticatedIdentity:
    """The GitHub user behind a set of credentials."""
    login: str
    name: str = ''
    avatar_url: str = ''

    @classmethod
    def from_api(cls, data: Dict) -> 'AuthenticatedIdentity':
        return cls(
            login=_require(data, 'login', 'user'),
            name=data.get('name') or '',
            avatar_url=data.get('avatar_url') or ''
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            'login': self.login,
            'name': self.name,
            'avatar_url': self.avatar_url
        }


@dataclass
class PullRequestSummary:
    """A pull request as returned by the issue search endpoint."""
    title: str
    html_url: str
    number: int
    api_url: str  # pull_request.url, base for the commits sub-resource

    @classmethod
    def from_api(cls, item: Dict) -> 'PullRequestSummary':
        pull_request = _require(item, 'pull_request', 'search item')
        return cls(
            title=_require(item, 'title', 'search item'),
            html_url=_require(item, 'html_url', 'search item'),
            number=_require(item, 'number', 'search item'),
            api_url=_require(pull_request, 'url', 'search item')
        )


@dataclass
class CommitRecord:
    """A single commit of a pull request."""
    sha: str
    message: str

    @classmethod
    def from_api(cls, data: Dict) -> 'CommitRecord':
        commit = _require(data, 'commit', 'commit')
        return cls(
            sha=_require(data, 'sha', 'commit'),
            message=_require(commit, 'message', 'commit') or ''
        )

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def first_line(self) -> str:
        return self.message.split('\n', 1)[0]


@dataclass
class Session:
    """Server-side login session."""
    session_id: str
    identity: AuthenticatedIdentity
    token: Dict[str, Any]
    created_at: datetime = field(default_factory=datetime.now)
