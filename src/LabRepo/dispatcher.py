"""Abstract base class for request dispatchers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union

import requests

PathSegment = Union[str, int]


class RequestDispatcher(ABC):
    """Issues one HTTP request against the repository API.

    Implementations build the URL from ``path`` segments (percent-encoding
    each one), send ``params`` and return the response when its status equals
    ``expected_status``. Anything else raises ``TransportError``.
    """

    @abstractmethod
    def request(
        self,
        method: str,
        expected_status: int,
        params: dict[str, str] | None,
        *path: PathSegment,
        stream: bool = False,
    ) -> requests.Response:
        """Send the request and return the validated response."""

    def get(
        self,
        expected_status: int,
        params: dict[str, str] | None,
        *path: PathSegment,
        stream: bool = False,
    ) -> requests.Response:
        return self.request("GET", expected_status, params, *path, stream=stream)

    def post(
        self, expected_status: int, params: dict[str, str] | None, *path: PathSegment
    ) -> requests.Response:
        return self.request("POST", expected_status, params, *path)

    def put(
        self, expected_status: int, params: dict[str, str] | None, *path: PathSegment
    ) -> requests.Response:
        return self.request("PUT", expected_status, params, *path)

    def delete(
        self, expected_status: int, params: dict[str, str] | None, *path: PathSegment
    ) -> requests.Response:
        return self.request("DELETE", expected_status, params, *path)
