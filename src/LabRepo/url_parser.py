"""Project URL parsing."""

from __future__ import annotations

from urllib.parse import unquote, urlparse

from LabRepo.models import ProjectRef


class URLParseError(Exception):
    """Raised when a URL cannot be parsed."""


def parse_project_url(url: str) -> ProjectRef:
    """Parse a GitLab project URL and return a ProjectRef.

    Supported formats:
      - https://gitlab.com/group/project
      - https://gitlab.com/group/subgroup/project.git
      - https://gitlab.com/group/project/-/tree/branch
      - https://gitlab.com/group/project/tree/branch/with/slashes
      - https://gitlab.example.com:8443/group/project
    """
    url = url.strip()
    if not url:
        raise URLParseError("URL is empty.")

    parsed = urlparse(url)
    if not parsed.scheme:
        raise URLParseError(f"Invalid URL (no scheme): {url}")
    if parsed.scheme not in ("http", "https"):
        raise URLParseError(f"Unsupported scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise URLParseError(f"Invalid URL (no host): {url}")

    base_url = f"{parsed.scheme}://{parsed.netloc}"
    parts = [p for p in parsed.path.split("/") if p]

    ref = None
    if "-" in parts:
        # group/project/-/tree/<ref>  (also /-/blob/, /-/branches, ...)
        idx = parts.index("-")
        ref = _extract_ref(parts[idx + 1:])
        parts = parts[:idx]
    elif "tree" in parts[2:]:
        idx = parts.index("tree", 2)
        ref = _extract_ref(parts[idx:])
        parts = parts[:idx]

    if len(parts) < 2:
        raise URLParseError(f"GitLab URL must include namespace/project: {url}")

    parts[-1] = parts[-1].removesuffix(".git")
    return ProjectRef(
        base_url=base_url,
        path=unquote("/".join(parts)),
        ref=ref,
    )


def _extract_ref(tail: list[str]) -> str | None:
    """Everything after tree/ is the ref (may contain slashes)."""
    if len(tail) >= 2 and tail[0] in ("tree", "blob"):
        return unquote("/".join(tail[1:]))
    return None
