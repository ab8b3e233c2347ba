"""Filename extraction from Content-Disposition headers."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Mapping, Union
from urllib.parse import unquote

import requests

from LabRepo.errors import MissingFilenameHeader

# filename*=UTF-8''name%20with%20spaces (RFC 5987)
_EXTENDED_RE = re.compile(r"filename\*\s*=\s*([\w!#$&+.^`|~-]+)'[^']*'([^;\s]+)", re.IGNORECASE)
# filename="quoted; name"  or  filename=plain
_QUOTED_RE = re.compile(r'(?<![*\w])filename\s*=\s*"((?:[^"\\]|\\.)*)"', re.IGNORECASE)
_TOKEN_RE = re.compile(r"(?<![*\w])filename\s*=\s*([^;\s\"]+)", re.IGNORECASE)


def resolve_filename(source: Union[requests.Response, Mapping[str, str]]) -> str:
    """Return the filename suggested by a response's Content-Disposition header.

    Accepts a response or its headers. Directory components are dropped so the
    name is always safe to join onto a target directory.

    Raises:
        MissingFilenameHeader: if the header is absent or carries no filename.
    """
    headers = source.headers if isinstance(source, requests.Response) else source
    header = headers.get("Content-Disposition")
    if not header:
        raise MissingFilenameHeader("Response has no Content-Disposition header.")

    name = _parse_filename(header)
    # Servers use "/" while Windows-style names may carry "\".
    name = PurePosixPath(name.replace("\\", "/")).name if name else ""
    if not name or name in (".", ".."):
        raise MissingFilenameHeader(
            f"Content-Disposition header has no usable filename: {header!r}"
        )
    return name


def _parse_filename(header: str) -> str | None:
    match = _EXTENDED_RE.search(header)
    if match:
        charset, value = match.group(1), match.group(2)
        try:
            return unquote(value, encoding=charset or "utf-8")
        except LookupError:
            return unquote(value)

    match = _QUOTED_RE.search(header)
    if match:
        return re.sub(r"\\(.)", r"\1", match.group(1))

    match = _TOKEN_RE.search(header)
    if match:
        return match.group(1)
    return None
