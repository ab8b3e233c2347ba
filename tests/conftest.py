"""Shared fixtures: a recording dispatcher and hand-built responses."""

from __future__ import annotations

import io
import json

import pytest
import requests

from LabRepo.dispatcher import RequestDispatcher


def make_response(
    status: int = 200,
    json_body=None,
    body: str | bytes | None = None,
    headers: dict | None = None,
    stream_data: bytes | None = None,
) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.encoding = "utf-8"
    resp.headers.update(headers or {})
    if stream_data is not None:
        resp.raw = io.BytesIO(stream_data)
    elif json_body is not None:
        resp._content = json.dumps(json_body).encode()
    elif body is not None:
        resp._content = body.encode() if isinstance(body, str) else body
    else:
        resp._content = b""
    return resp


def interrupted_response(
    first_chunk: bytes = b"part", headers: dict | None = None
) -> requests.Response:
    """A streamed response whose connection drops after ``first_chunk``."""
    resp = make_response(stream_data=b"", headers=headers)

    def iter_content(chunk_size=1, decode_unicode=False):
        yield first_chunk
        raise requests.exceptions.ChunkedEncodingError("Connection broken: peer reset")

    resp.iter_content = iter_content
    return resp


class FakeDispatcher(RequestDispatcher):
    """Records every request and replays queued responses in order."""

    def __init__(self, *responses: requests.Response):
        self.calls: list[dict] = []
        self._responses = list(responses)

    def queue(self, response: requests.Response) -> None:
        self._responses.append(response)

    def request(self, method, expected_status, params, *path, stream=False):
        self.calls.append(
            {
                "method": method,
                "expected_status": expected_status,
                "params": params,
                "path": path,
                "stream": stream,
            }
        )
        return self._responses.pop(0)

    @property
    def invoked(self) -> bool:
        return bool(self.calls)


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()
