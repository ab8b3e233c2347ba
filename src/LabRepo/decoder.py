"""Response decoding.

The shape of a response body is chosen by the calling operation, never by
the Content-Type header: GitLab serves raw files and blobs as ``text/plain``
(sometimes with JSON inside), and archives as arbitrary binary types.
"""

from __future__ import annotations

import json
from typing import Any, Iterator, Protocol, TypeVar

import requests

from LabRepo.content_disposition import resolve_filename
from LabRepo.errors import DecodeError, StreamConsumedError, TransportError

DEFAULT_CHUNK_SIZE = 65_536


class _FromDict(Protocol):
    @classmethod
    def from_dict(cls, data: dict) -> Any: ...


T = TypeVar("T", bound=_FromDict)


def _load_json(response: requests.Response) -> Any:
    body = response.text
    try:
        return json.loads(body)
    except ValueError as exc:
        raise DecodeError("Response body is not valid JSON", body=body, cause=exc) from exc


def decode_entity(response: requests.Response, model: type[T]) -> T:
    """Decode a JSON object body into ``model``."""
    data = _load_json(response)
    if not isinstance(data, dict):
        raise DecodeError(
            f"Expected a JSON object for {model.__name__}, got {type(data).__name__}",
            body=response.text,
        )
    try:
        return model.from_dict(data)
    except DecodeError as exc:
        raise DecodeError(str(exc), body=response.text, cause=exc) from exc


def decode_list(response: requests.Response, model: type[T]) -> list[T]:
    """Decode a JSON array body into a list of ``model``, keeping server order."""
    data = _load_json(response)
    if not isinstance(data, list):
        raise DecodeError(
            f"Expected a JSON array of {model.__name__}, got {type(data).__name__}",
            body=response.text,
        )
    try:
        return [model.from_dict(item) for item in data]
    except DecodeError as exc:
        raise DecodeError(str(exc), body=response.text, cause=exc) from exc


def decode_text(response: requests.Response) -> str:
    """Return the body as text, unparsed.

    Raw files come back as ``text/plain`` without a charset, for which
    requests would guess ISO-8859-1; those bodies are read as UTF-8. A body
    that is not valid UTF-8 falls back to ``response.text`` and the declared
    or detected encoding instead of replacing undecodable bytes.
    """
    content_type = response.headers.get("Content-Type", "")
    if "charset=" not in content_type.lower():
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError:
            pass
    return response.text


def decode_stream(
    response: requests.Response, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> ArchiveStream:
    """Wrap a streamed response body for single-pass consumption."""
    return ArchiveStream(response, chunk_size)


class ArchiveStream:
    """A lazily-read response body that can be consumed exactly once.

    Iterating yields ``bytes`` chunks; ``read()`` drains whatever is left.
    The caller owns the stream and must ``close()`` it (or use it as a
    context manager) unless it is handed to ``archive.materialize``.
    """

    def __init__(self, response: requests.Response, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._response = response
        self._chunk_size = chunk_size
        self._consumed = False
        self._closed = False

    @property
    def headers(self):
        return self._response.headers

    @property
    def filename(self) -> str:
        """Filename from Content-Disposition; raises MissingFilenameHeader."""
        return resolve_filename(self._response)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[bytes]:
        if self._consumed:
            raise StreamConsumedError("Archive stream has already been consumed.")
        if self._closed:
            raise StreamConsumedError("Archive stream is closed.")
        self._consumed = True
        return self._iter_chunks()

    def _iter_chunks(self) -> Iterator[bytes]:
        try:
            for chunk in self._response.iter_content(chunk_size=self._chunk_size):
                if chunk:
                    yield chunk
        except requests.RequestException as exc:
            raise TransportError(f"Archive download interrupted: {exc}", cause=exc) from exc

    def read(self) -> bytes:
        return b"".join(self)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._response.close()

    def __enter__(self) -> ArchiveStream:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
