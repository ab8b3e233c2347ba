"""Data classes for LabRepo."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from LabRepo.errors import DecodeError


def _require(data: Any, key: str, kind: str) -> Any:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {kind}, got {type(data).__name__}")
    if key not in data:
        raise DecodeError(f"{kind} is missing required field '{key}'")
    return data[key]


class TreeItemType(Enum):
    TREE = "tree"
    BLOB = "blob"
    COMMIT = "commit"  # submodule


@dataclass
class ProjectRef:
    base_url: str
    path: str
    ref: str | None = None


@dataclass
class Commit:
    id: str
    message: str = ""
    parent_ids: list[str] = field(default_factory=list)
    authored_date: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    committed_date: str | None = None
    committer_name: str | None = None
    committer_email: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Commit:
        return cls(
            id=_require(data, "id", "Commit"),
            message=data.get("message") or "",
            parent_ids=list(data.get("parent_ids") or []),
            authored_date=data.get("authored_date"),
            author_name=data.get("author_name"),
            author_email=data.get("author_email"),
            committed_date=data.get("committed_date"),
            committer_name=data.get("committer_name"),
            committer_email=data.get("committer_email"),
        )


@dataclass
class Branch:
    name: str
    protected: bool = False
    merged: bool = False
    developers_can_push: bool = False
    developers_can_merge: bool = False
    commit: Commit | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Branch:
        name = _require(data, "name", "Branch")
        commit = data.get("commit")
        return cls(
            name=name,
            protected=bool(data.get("protected", False)),
            merged=bool(data.get("merged", False)),
            developers_can_push=bool(data.get("developers_can_push", False)),
            developers_can_merge=bool(data.get("developers_can_merge", False)),
            commit=Commit.from_dict(commit) if commit else None,
        )


@dataclass
class Release:
    tag_name: str
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Release:
        return cls(
            tag_name=_require(data, "tag_name", "Release"),
            description=data.get("description") or "",
        )


@dataclass
class Tag:
    name: str
    message: str | None = None
    commit: Commit | None = None
    release: Release | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Tag:
        name = _require(data, "name", "Tag")
        commit = data.get("commit")
        release = data.get("release")
        return cls(
            name=name,
            message=data.get("message"),
            commit=Commit.from_dict(commit) if commit else None,
            release=Release.from_dict(release) if release else None,
        )


@dataclass
class TreeItem:
    id: str
    name: str
    type: TreeItemType
    path: str = ""
    mode: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> TreeItem:
        raw_type = _require(data, "type", "TreeItem")
        try:
            item_type = TreeItemType(raw_type)
        except ValueError as exc:
            raise DecodeError(f"Unknown tree item type: {raw_type!r}", cause=exc) from exc
        name = _require(data, "name", "TreeItem")
        return cls(
            id=_require(data, "id", "TreeItem"),
            name=name,
            type=item_type,
            path=data.get("path") or name,
            mode=data.get("mode") or "",
        )

    @property
    def is_dir(self) -> bool:
        return self.type == TreeItemType.TREE
