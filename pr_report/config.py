"""
Runtime configuration for the PR report CLI and server.

Values come from environment variables, optionally loaded from a ``.env``
file in the working directory.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .api_client import DEFAULT_API_URL

DEFAULT_FRONTEND_URL = 'http://localhost:5173'
DEFAULT_API_PORT = 7733


def configure_logging(level: str = None) -> None:
    """Configure root logging (can be overridden by LOG_LEVEL environment variable)."""
    log_level = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%m/%d/%Y %I:%M:%S %p'
    )


def _int_from_env(name: str, default: Optional[int]) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logging.warning(f"Invalid {name} value '{value}', using default: {default}")
        return default


@dataclass
class Settings:
    """Server settings."""
    github_client_id: str = ''
    github_client_secret: str = ''
    frontend_url: str = DEFAULT_FRONTEND_URL
    oauth_redirect_url: str = ''
    api_port: int = DEFAULT_API_PORT
    github_api_url: str = DEFAULT_API_URL
    session_ttl_hours: Optional[int] = None

    def __post_init__(self):
        self.frontend_url = self.frontend_url.rstrip('/')
        if not self.oauth_redirect_url:
            self.oauth_redirect_url = f"{self.frontend_url}/auth/github/callback"

    @property
    def session_ttl_seconds(self) -> Optional[int]:
        if not self.session_ttl_hours:
            return None
        return self.session_ttl_hours * 3600

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> 'Settings':
        """Build settings from the environment.

        Args:
            load_env_file: Whether to load a .env file first
        """
        if load_env_file:
            load_dotenv()

        settings = cls(
            github_client_id=os.environ.get('GITHUB_CLIENT_ID', ''),
            github_client_secret=os.environ.get('GITHUB_CLIENT_SECRET', ''),
            frontend_url=os.environ.get('FRONTEND_URL') or DEFAULT_FRONTEND_URL,
            oauth_redirect_url=os.environ.get('OAUTH_REDIRECT_URL', ''),
            api_port=_int_from_env('API_PORT', DEFAULT_API_PORT),
            github_api_url=os.environ.get('GITHUB_API_URL') or DEFAULT_API_URL,
            session_ttl_hours=_int_from_env('SESSION_TTL_HOURS', None)
        )
        logging.debug(f"Loaded settings: frontend={settings.frontend_url}, port={settings.api_port}")
        return settings
