"""GitLab REST API request dispatcher."""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from LabRepo.config import Settings
from LabRepo.dispatcher import PathSegment, RequestDispatcher
from LabRepo.errors import TransportError

logger = logging.getLogger(__name__)

# Methods whose parameters travel as a form body rather than a query string.
_FORM_METHODS = frozenset({"POST", "PUT"})


class GitLabClient(RequestDispatcher):
    """Dispatcher for a GitLab instance using the REST API."""

    def __init__(
        self,
        base_url: str = "https://gitlab.com",
        token: str | None = None,
        api_version: str = "v3",
        timeout: float = 30.0,
    ):
        self.api_base = f"{base_url.rstrip('/')}/api/{api_version}"
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/json"
        self.session.headers["User-Agent"] = "LabRepo/1.0"
        if token:
            self.session.headers["PRIVATE-TOKEN"] = token

    @classmethod
    def from_settings(cls, settings: Settings) -> GitLabClient:
        token = settings.gitlab_token.get_secret_value() if settings.gitlab_token else None
        return cls(
            base_url=settings.gitlab_url,
            token=token,
            api_version=settings.api_version,
            timeout=settings.request_timeout,
        )

    def url_for(self, *path: PathSegment) -> str:
        segments = "/".join(quote(str(segment), safe="") for segment in path)
        return f"{self.api_base}/{segments}"

    def request(
        self,
        method: str,
        expected_status: int,
        params: dict[str, str] | None,
        *path: PathSegment,
        stream: bool = False,
    ) -> requests.Response:
        method = method.upper()
        url = self.url_for(*path)
        kwargs: dict = {"timeout": self.timeout, "stream": stream}
        if method in _FORM_METHODS:
            kwargs["data"] = params or {}
        else:
            kwargs["params"] = params or None

        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(
                f"Network error calling {method} {url}: {exc}", cause=exc
            ) from exc

        if resp.status_code != expected_status:
            self._raise_for_status(resp, method, url, expected_status)
        return resp

    def _raise_for_status(
        self,
        resp: requests.Response,
        method: str,
        url: str,
        expected_status: int,
    ) -> None:
        body = resp.text
        resp.close()
        logger.warning(
            "%s %s returned HTTP %s (expected %s)",
            method, url, resp.status_code, expected_status,
        )

        if resp.status_code == 401:
            message = "Authentication failed. Check your GitLab token."
        elif resp.status_code == 403:
            message = "Access denied. The token may lack permissions for this project."
        elif resp.status_code == 404:
            message = (
                "Resource not found. Check the project, ref or path, "
                "or provide a token for private projects."
            )
        else:
            message = f"GitLab API returned HTTP {resp.status_code} for {method} {url}"

        detail = _server_message(resp)
        if detail:
            message = f"{message} ({detail})"
        raise TransportError(message, status_code=resp.status_code, body=body)


def _server_message(resp: requests.Response) -> str:
    """Pull GitLab's ``message``/``error`` field out of an error body, if any."""
    try:
        data = resp.json()
    except ValueError:
        return ""
    if not isinstance(data, dict):
        return ""
    detail = data.get("message") or data.get("error") or ""
    return detail if isinstance(detail, str) else str(detail)
