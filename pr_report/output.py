"""Markdown formatting and file output for PR reports."""

import logging
import os

from .models import CommitRecord, PullRequestSummary

REPORT_FILENAME_TEMPLATE = 'pr-report-{date}.md'


class MarkdownFormatter:
    """Formats report blocks as Markdown.

    A block is a PR heading, up to ``max_commits`` commit bullets and a
    single blank line.
    """

    def __init__(self, max_commits: int = 5):
        """Initialize the formatter.

        Args:
            max_commits: Maximum number of commit bullets listed per PR
        """
        self.max_commits = max_commits

    def format_heading(self, pr: PullRequestSummary) -> str:
        return f"## [{pr.title}]({pr.html_url})\n"

    def format_commit(self, commit: CommitRecord) -> str:
        return f"- `{commit.short_sha}`: {commit.first_line}\n"

    def format_commit_failure(self, pr: PullRequestSummary, error: Exception) -> str:
        """Format the failure note on one line, whatever the error text contains."""
        message = " ".join(str(error).split())
        return f"Failed to fetch commits for PR #{pr.number}: {message}\n"

    def format_block(self, pr: PullRequestSummary, commits) -> str:
        """Format a full block for a PR whose commits were fetched."""
        lines = [self.format_heading(pr)]
        lines.extend(self.format_commit(c) for c in commits[:self.max_commits])
        lines.append('\n')
        return ''.join(lines)

    def format_failed_block(self, pr: PullRequestSummary, error: Exception) -> str:
        """Format a block for a PR whose commits could not be fetched."""
        return self.format_heading(pr) + self.format_commit_failure(pr, error) + '\n'


def report_filename(date: str) -> str:
    return REPORT_FILENAME_TEMPLATE.format(date=date)


def write_report(report: str, date: str, directory: str = '.') -> str:
    """Write a report to ``pr-report-<date>.md``.

    Args:
        report: Markdown text
        date: Report date in YYYY-MM-DD format
        directory: Target directory

    Returns:
        Path of the written file

    Raises:
        OSError: If the file cannot be written
    """
    path = os.path.join(directory, report_filename(date))
    with open(path, 'w', encoding='utf-8') as f:
        f.write(report)
    logging.info(f"Saved report to {path} ({len(report)} characters)")
    return path
