"""FastAPI server exposing PR reports behind GitHub login."""

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from .api_client import GitHubAPIClient
from .auth import (
    SESSION_COOKIE,
    SESSION_COOKIE_MAX_AGE,
    STATE_COOKIE,
    STATE_COOKIE_MAX_AGE,
    OAuthGateway,
    client_for_credentials,
    parse_authorization_header,
    states_match,
)
from .config import Settings, configure_logging
from .errors import PRReportError, UnauthorizedError, UpstreamError
from .report_generator import ReportGenerator
from .sessions import SessionStore

MARKDOWN_MEDIA_TYPE = 'text/markdown; charset=utf-8'


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=307)


def create_app(
    settings: Settings = None,
    session_store: SessionStore = None,
    oauth_gateway: OAuthGateway = None,
    client_factory: Optional[Callable[[tuple], GitHubAPIClient]] = None
) -> FastAPI:
    """Create the report API.

    Args:
        settings: Server settings, read from the environment when omitted
        session_store: Store for logged-in sessions
        oauth_gateway: GitHub OAuth flow, built from settings when omitted
        client_factory: Builds a GitHub client from Authorization header credentials
    """
    settings = settings or Settings.from_env()
    sessions = session_store if session_store is not None else SessionStore(settings.session_ttl_seconds)
    gateway = oauth_gateway or OAuthGateway(
        settings.github_client_id,
        settings.github_client_secret,
        settings.oauth_redirect_url,
        api_base_url=settings.github_api_url
    )
    if client_factory is None:
        def client_factory(credentials):
            return client_for_credentials(credentials, settings.github_api_url)

    app = FastAPI(
        title="GitHub PR Report API",
        description="Markdown reports of the PRs a GitHub user opened on a given day",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.sessions = sessions

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    cors_headers = {
        "Access-Control-Allow-Origin": settings.frontend_url,
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
        "Access-Control-Allow-Credentials": "true",
    }

    @app.middleware("http")
    async def frontend_cors(request: Request, call_next):
        """Answer every OPTIONS request with an empty 200 and put the CORS headers on all responses."""
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=cors_headers)
        response = await call_next(request)
        for name, value in cors_headers.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(PRReportError)
    async def report_error_handler(request: Request, exc: PRReportError):
        return PlainTextResponse(str(exc), status_code=exc.http_status)

    def resolve_client(request: Request) -> GitHubAPIClient:
        """Pick the caller's GitHub client: session cookie first, then Authorization header."""
        session_id = request.cookies.get(SESSION_COOKIE)
        if session_id:
            session = sessions.lookup(session_id)
            if session is not None:
                return gateway.client_for_token(session.token)

        credentials = parse_authorization_header(request.headers.get('Authorization'))
        if credentials is not None:
            return client_factory(credentials)

        if session_id:
            raise UnauthorizedError("unauthorized: invalid session")
        raise UnauthorizedError("unauthorized: no session cookie")

    @app.get("/health")
    def health():
        return {"status": "ok", "sessions": len(sessions)}

    @app.get("/api/report")
    def report(request: Request, date: Optional[str] = None):
        """Markdown report of the caller's PRs created on ``date``."""
        client = resolve_client(request)
        with client:
            if not date:
                return PlainTextResponse("Date parameter is required", status_code=400)
            try:
                markdown = ReportGenerator(client).generate_report(date)
            except UpstreamError as e:
                logging.error(f"Failed to generate report for {date}: {e}")
                return PlainTextResponse(f"Failed to generate report: {e}", status_code=500)
        return Response(content=markdown, media_type=MARKDOWN_MEDIA_TYPE)

    @app.get("/api/me")
    def me(request: Request):
        session = sessions.lookup(request.cookies.get(SESSION_COOKIE))
        if session is None:
            return PlainTextResponse("Unauthorized", status_code=401)
        return JSONResponse(session.identity.to_dict())

    @app.get("/auth/github/login")
    def github_login():
        state = gateway.new_state()
        response = _redirect(gateway.authorization_url(state))
        response.set_cookie(STATE_COOKIE, state, max_age=STATE_COOKIE_MAX_AGE, path='/', httponly=True)
        return response

    @app.get("/auth/github/callback")
    def github_callback(request: Request, code: Optional[str] = None, state: Optional[str] = None):
        if not states_match(request.cookies.get(STATE_COOKIE), state):
            logging.warning("Invalid OAuth state in GitHub callback")
            return _redirect('/')

        try:
            token = gateway.exchange_code(code)
            with gateway.client_for_token(token) as client:
                identity = client.fetch_user()
        except PRReportError as e:
            logging.warning(f"GitHub login failed: {e}")
            return _redirect('/')

        sessions.sweep_expired()
        session_id = sessions.create(identity, token)

        response = _redirect(settings.frontend_url)
        response.set_cookie(SESSION_COOKIE, session_id, max_age=SESSION_COOKIE_MAX_AGE, path='/', httponly=True)
        response.delete_cookie(STATE_COOKIE, path='/')
        return response

    @app.get("/auth/logout")
    def logout(request: Request):
        sessions.delete(request.cookies.get(SESSION_COOKIE))
        response = _redirect(settings.frontend_url)
        response.delete_cookie(SESSION_COOKIE, path='/', httponly=True)
        return response

    return app


def main():
    """Run the server with uvicorn on API_PORT."""
    import uvicorn

    configure_logging()
    settings = Settings.from_env()
    app = create_app(settings)
    logging.info(f"Server starting on :{settings.api_port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.api_port)


if __name__ == "__main__":
    main()
