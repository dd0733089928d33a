#!/usr/bin/env python3
"""
GitHub PR Report
Writes a Markdown report of the PRs you opened on a given day, with their first commits.
"""

import argparse
import logging
import os
import sys
from dotenv import load_dotenv

from pr_report.api_client import GitHubAPIClient
from pr_report.config import configure_logging
from pr_report.errors import InvalidDateError, PRReportError
from pr_report.output import write_report
from pr_report.report_generator import ReportGenerator, parse_report_date

USAGE = "Usage: pr-report.py --username <username> --token <token> --date <YYYY-MM-DD>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Markdown report of your GitHub PRs created on a given day.")
    parser.add_argument('--username', help="GitHub username (default: GITHUB_USERNAME)")
    parser.add_argument('--token', help="GitHub personal access token (default: GITHUB_TOKEN)")
    parser.add_argument('--date', help="Date in YYYY-MM-DD format")
    parser.add_argument('--output-dir', default='.', help="Directory to write the report to")
    return parser


def main(argv=None) -> int:
    """Main entry point for the script."""
    # Load environment variables from .env file if it exists
    load_dotenv()
    configure_logging()

    args = build_parser().parse_args(argv)
    username = args.username or os.environ.get('GITHUB_USERNAME')
    token = args.token or os.environ.get('GITHUB_TOKEN')

    if not username or not token or not args.date:
        print(USAGE, file=sys.stderr)
        return 1

    try:
        date = parse_report_date(args.date)
    except InvalidDateError:
        print("Invalid date format. Use YYYY-MM-DD", file=sys.stderr)
        return 1

    logging.info(f"Starting report for user: {username}")
    with GitHubAPIClient.with_basic_auth(username, token) as client:
        try:
            report = ReportGenerator(client).generate_report(date)
        except PRReportError as e:
            logging.error(f"Report generation failed: {e}")
            print(f"Failed to generate report: {e}", file=sys.stderr)
            return 1

    try:
        path = write_report(report, date, args.output_dir)
    except OSError as e:
        print(f"Failed to create output file: {e}", file=sys.stderr)
        return 1

    print(f"Markdown report written to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
