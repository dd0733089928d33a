"""Report generation: search a user's PRs for a day and list their commits."""

import logging
from datetime import datetime
from typing import Optional

from .api_client import GitHubAPIClient
from .errors import InvalidDateError, InvalidInputError, UnauthorizedError, UpstreamError
from .models import AuthenticatedIdentity
from .output import MarkdownFormatter

DATE_FORMAT = '%Y-%m-%d'


def parse_report_date(date_str: Optional[str]) -> str:
    """Validate a report date and return it normalized to YYYY-MM-DD.

    Raises:
        InvalidInputError: If no date was given
        InvalidDateError: If the date is not a valid YYYY-MM-DD calendar date
    """
    if not date_str:
        raise InvalidInputError("Date parameter is required")
    try:
        date = datetime.strptime(date_str, DATE_FORMAT)
    except ValueError as e:
        raise InvalidDateError(f"invalid date format, use YYYY-MM-DD: {e}") from e
    return date.strftime(DATE_FORMAT)


class ReportGenerator:
    """Builds the Markdown report of the caller's PRs created on a given day."""

    def __init__(self, client: GitHubAPIClient, formatter: MarkdownFormatter = None):
        """Initialize the generator.

        Args:
            client: GitHub API client carrying the caller's credentials
            formatter: Markdown formatter, defaults to five commits per PR
        """
        self.client = client
        self.formatter = formatter or MarkdownFormatter()

    def resolve_identity(self) -> AuthenticatedIdentity:
        """Look up the user the client is authenticated as.

        Raises:
            UnauthorizedError: If GitHub rejects the credentials
            UpstreamError: On any other failure
        """
        try:
            return self.client.fetch_user()
        except UpstreamError as e:
            if e.status_code == 401:
                raise UnauthorizedError(f"unauthorized: {e}") from e
            raise e.with_context('failed to get authenticated user') from e

    def generate_report(self, date_str: str) -> str:
        """Generate the report for ``date_str``.

        The author is always the user the client is authenticated as. PRs keep
        the order returned by the search API. A PR whose commits cannot be
        fetched gets an inline failure note instead of failing the report.

        Raises:
            InvalidInputError: If the date is missing or malformed
            UpstreamError: If the user lookup or the search fails
        """
        date = parse_report_date(date_str)
        logging.info(f"Generating report for date: {date}")

        identity = self.resolve_identity()
        pull_requests = self.client.search_pull_requests(identity.login, date)
        logging.info(f"Found {len(pull_requests)} PR(s) by {identity.login} created on {date}")

        blocks = []
        for pr in pull_requests:
            logging.debug(f"Fetching commits for PR #{pr.number}")
            try:
                commits = self.client.fetch_commits(pr.api_url)
            except UpstreamError as e:
                logging.warning(f"Failed to fetch commits for PR #{pr.number}: {e}")
                blocks.append(self.formatter.format_failed_block(pr, e))
                continue
            blocks.append(self.formatter.format_block(pr, commits))

        return ''.join(blocks)
