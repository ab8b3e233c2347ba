"""Request parameter encoding."""

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Iterable

from LabRepo.errors import MissingRequiredParameter


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _to_str(value: Any) -> str:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    return str(value)


class ParameterForm:
    """Ordered set of request parameters built one field at a time.

    Example:
        params = (
            ParameterForm()
            .with_param("tag_name", "v1.0", required=True)
            .with_param("message", None)
            .as_dict()
        )
        # {"tag_name": "v1.0"}
    """

    def __init__(self) -> None:
        self._params: dict[str, str] = {}

    def with_param(self, name: str, value: Any, required: bool = False) -> ParameterForm:
        """Add a parameter.

        A required parameter that is None or empty raises
        ``MissingRequiredParameter``; an optional one is left out.
        """
        if _is_missing(value):
            if required:
                raise MissingRequiredParameter(name)
            return self
        self._params[name] = _to_str(value)
        return self

    def as_dict(self) -> dict[str, str]:
        return dict(self._params)

    def __len__(self) -> int:
        return len(self._params)


def require(name: str, value: Any) -> Any:
    """Return ``value`` unchanged, or raise if it is None or empty.

    Used for identifiers that travel in the URL path rather than the form.
    """
    if _is_missing(value):
        raise MissingRequiredParameter(name)
    return value


def encode(pairs: Iterable[tuple[str, Any, bool]]) -> dict[str, str]:
    """Encode ``(name, value, required)`` triples in declaration order."""
    form = ParameterForm()
    for name, value, required in pairs:
        form.with_param(name, value, required)
    return form.as_dict()
