"""Error types raised while building PR reports."""

from typing import Optional


class PRReportError(Exception):
    """Base class for all report failures."""
    http_status = 500


class InvalidInputError(PRReportError):
    """A required parameter is missing or malformed."""
    http_status = 400


class InvalidDateError(InvalidInputError):
    """The report date is not in YYYY-MM-DD format."""


class UnauthorizedError(PRReportError):
    """No usable credentials for the caller."""
    http_status = 401


class UpstreamError(PRReportError):
    """The GitHub API answered with a non-200 status or could not be reached.

    Attributes:
        status_code: HTTP status returned by GitHub, None on transport failure
        body: Response body, if one was received
    """
    http_status = 500

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ''):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, context: str, response) -> 'UpstreamError':
        body = response.text
        return cls(
            f"{context}: status code {response.status_code}, body: {body}",
            status_code=response.status_code,
            body=body
        )

    def with_context(self, context: str) -> 'UpstreamError':
        """Return a copy of this error prefixed with additional context."""
        error = type(self)(f"{context}: {self}", status_code=self.status_code, body=self.body)
        error.__cause__ = self
        return error


class DecodeError(UpstreamError):
    """A GitHub response could not be decoded into the expected shape."""
