"""Exception hierarchy for LabRepo.

Every failure surfaced by the client derives from ``GitLabApiError`` so callers
can catch a single type. The original exception, when there is one, is chained
as ``__cause__`` and also kept on ``cause``.
"""

from __future__ import annotations


class GitLabApiError(Exception):
    """Base exception for all repository API failures."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


# ── Request shaping ─────────────────────────────────────────────────────────


class MissingRequiredParameter(GitLabApiError):
    """A required request parameter was None or empty."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required parameter: {name}")


# ── Transport ───────────────────────────────────────────────────────────────


class TransportError(GitLabApiError):
    """The request failed on the network or returned an unexpected status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause)
        self.status_code = status_code
        self.body = body


# ── Response decoding ───────────────────────────────────────────────────────


class DecodeError(GitLabApiError):
    """The response body does not have the shape the operation expects."""

    def __init__(
        self,
        message: str,
        body: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause)
        self.body = body


class StreamConsumedError(DecodeError):
    """An archive stream was read after it had already been consumed."""


class MissingFilenameHeader(GitLabApiError):
    """No filename could be resolved from the Content-Disposition header."""


# ── Local file I/O ──────────────────────────────────────────────────────────


class FileIOError(GitLabApiError):
    """Reading or writing a local file failed."""


class ReleaseNotesReadError(FileIOError):
    """The release-notes file for a tag could not be read."""


class ArchiveWriteError(FileIOError):
    """The repository archive could not be written to disk."""
