"""GitHub PR Report - Markdown reports of the PRs a user opened on a given day."""

from .models import AuthenticatedIdentity, CommitRecord, PullRequestSummary, Session
from .errors import (
    PRReportError,
    InvalidInputError,
    InvalidDateError,
    UnauthorizedError,
    UpstreamError,
    DecodeError,
)
from .api_client import GitHubAPIClient
from .output import MarkdownFormatter
from .report_generator import ReportGenerator
from .sessions import SessionStore

__all__ = [
    'AuthenticatedIdentity',
    'CommitRecord',
    'PullRequestSummary',
    'Session',
    'PRReportError',
    'InvalidInputError',
    'InvalidDateError',
    'UnauthorizedError',
    'UpstreamError',
    'DecodeError',
    'GitHubAPIClient',
    'MarkdownFormatter',
    'ReportGenerator',
    'SessionStore',
]
