"""Repository API: branches, tags, trees, raw content and archives."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

import requests

from LabRepo.archive import materialize
from LabRepo.config import Settings, get_settings
from LabRepo.decoder import (
    DEFAULT_CHUNK_SIZE,
    ArchiveStream,
    decode_entity,
    decode_list,
    decode_stream,
    decode_text,
)
from LabRepo.dispatcher import RequestDispatcher
from LabRepo.errors import ReleaseNotesReadError
from LabRepo.form import ParameterForm, require
from LabRepo.gitlab_client import GitLabClient
from LabRepo.models import Branch, Tag, TreeItem

OK = 200
CREATED = 201

ProjectId = Union[int, str]
# str is the notes text itself; a path-like points at a file holding them.
ReleaseNotes = Union[str, os.PathLike, None]


class RepositoryApi:
    """Operations on a project's repository.

    ``project_id`` is either the numeric project id or its full path
    (``"group/project"``); the dispatcher percent-encodes it as one segment.

    Deleting, protecting and unprotecting are idempotent on the GitLab side:
    repeating them against a branch or tag already in that state returns
    success. This class relies on that and does not mask errors itself.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        default_archive_dir: str | os.PathLike | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.dispatcher = dispatcher
        self.default_archive_dir = Path(
            default_archive_dir
            if default_archive_dir is not None
            else get_settings().default_archive_dir
        )
        self.chunk_size = chunk_size

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RepositoryApi:
        settings = settings or get_settings()
        return cls(
            GitLabClient.from_settings(settings),
            default_archive_dir=settings.default_archive_dir,
            chunk_size=settings.archive_chunk_size,
        )

    # --- Branches ---

    def get_branches(self, project_id: ProjectId) -> list[Branch]:
        """List branches, sorted by name alphabetically by the server."""
        resp = self.dispatcher.get(OK, None, *_repo(project_id), "branches")
        return decode_list(resp, Branch)

    def get_branch(self, project_id: ProjectId, branch_name: str) -> Branch:
        resp = self.dispatcher.get(
            OK, None, *_repo(project_id), "branches", require("branch_name", branch_name)
        )
        return decode_entity(resp, Branch)

    def create_branch(self, project_id: ProjectId, branch_name: str, ref: str) -> Branch:
        """Create ``branch_name`` from ``ref`` (a branch, tag or commit SHA)."""
        path = _repo(project_id)
        params = (
            ParameterForm()
            .with_param("branch_name", branch_name, required=True)
            .with_param("ref", ref, required=True)
            .as_dict()
        )
        resp = self.dispatcher.post(CREATED, params, *path, "branches")
        return decode_entity(resp, Branch)

    def delete_branch(self, project_id: ProjectId, branch_name: str) -> None:
        self.dispatcher.delete(
            OK, None, *_repo(project_id), "branches", require("branch_name", branch_name)
        )

    def protect_branch(self, project_id: ProjectId, branch_name: str) -> Branch:
        resp = self.dispatcher.put(
            OK, None, *_repo(project_id), "branches",
            require("branch_name", branch_name), "protect",
        )
        return decode_entity(resp, Branch)

    def unprotect_branch(self, project_id: ProjectId, branch_name: str) -> Branch:
        resp = self.dispatcher.put(
            OK, None, *_repo(project_id), "branches",
            require("branch_name", branch_name), "unprotect",
        )
        return decode_entity(resp, Branch)

    # --- Tags ---

    def get_tags(self, project_id: ProjectId) -> list[Tag]:
        """List tags, sorted by name in reverse alphabetical order by the server."""
        resp = self.dispatcher.get(OK, None, *_repo(project_id), "tags")
        return decode_list(resp, Tag)

    def create_tag(
        self,
        project_id: ProjectId,
        tag_name: str,
        ref: str,
        message: str | None = None,
        release_notes: ReleaseNotes = None,
    ) -> Tag:
        """Create a tag on ``ref``.

        Args:
            project_id: Project id or path.
            tag_name: Name of the tag, unique within the project.
            ref: Branch, tag or commit SHA to tag.
            message: Annotation message (optional).
            release_notes: Release notes as text, or a path to a file holding
                them (optional). A file is read completely before the request
                is sent.

        Raises:
            ReleaseNotesReadError: if the release-notes file cannot be read.
        """
        path = _repo(project_id)
        notes = _resolve_release_notes(release_notes)
        params = (
            ParameterForm()
            .with_param("tag_name", tag_name, required=True)
            .with_param("ref", ref, required=True)
            .with_param("message", message)
            .with_param("release_description", notes)
            .as_dict()
        )
        resp = self.dispatcher.post(CREATED, params, *path, "tags")
        return decode_entity(resp, Tag)

    def delete_tag(self, project_id: ProjectId, tag_name: str) -> None:
        self.dispatcher.delete(
            OK, None, *_repo(project_id), "tags", require("tag_name", tag_name)
        )

    # --- Tree and raw content ---

    def get_tree(
        self,
        project_id: ProjectId,
        file_path: str | None = "/",
        ref_name: str | None = "master",
        recursive: bool | None = False,
    ) -> list[TreeItem]:
        """List files and directories under ``file_path`` at ``ref_name``.

        Passing ``None`` for ``file_path`` or ``ref_name`` leaves the parameter
        out, so the server falls back to the repository root / default branch.
        """
        params = (
            ParameterForm()
            .with_param("id", project_id, required=True)
            .with_param("path", file_path)
            .with_param("ref_name", ref_name)
            .with_param("recursive", recursive)
            .as_dict()
        )
        resp = self.dispatcher.get(OK, params, *_repo(project_id), "tree")
        return decode_list(resp, TreeItem)

    def get_raw_file_content(self, project_id: ProjectId, ref: str, filepath: str) -> str:
        """Raw contents of ``filepath`` at a commit SHA or branch name."""
        path = (*_repo(project_id), "blobs", require("ref", ref))
        params = ParameterForm().with_param("filepath", filepath, required=True).as_dict()
        resp = self.dispatcher.get(OK, params, *path)
        return decode_text(resp)

    def get_raw_blob_content(self, project_id: ProjectId, sha: str) -> str:
        """Raw contents of the blob with the given blob SHA."""
        resp = self.dispatcher.get(
            OK, None, *_repo(project_id), "raw_blobs", require("sha", sha)
        )
        return decode_text(resp)

    # --- Archives ---

    def get_repository_archive(
        self, project_id: ProjectId, sha: str | None = None
    ) -> ArchiveStream:
        """Open the repository archive as a stream; the caller must close it.

        ``sha`` selects a commit; ``None`` archives the default branch.
        """
        return decode_stream(self._request_archive(project_id, sha), self.chunk_size)

    def save_repository_archive(
        self,
        project_id: ProjectId,
        sha: str | None = None,
        directory: str | os.PathLike | None = None,
    ) -> Path:
        """Download the repository archive into ``directory`` and return its path.

        The file name comes from the response's Content-Disposition header.
        An existing file with that name is replaced. ``directory=None`` uses
        the configured default archive directory.
        """
        with decode_stream(self._request_archive(project_id, sha), self.chunk_size) as stream:
            filename = stream.filename
            return materialize(
                stream, filename, directory, default_directory=self.default_archive_dir
            )

    def _request_archive(self, project_id: ProjectId, sha: str | None) -> requests.Response:
        path = _repo(project_id)
        params = ParameterForm().with_param("sha", sha).as_dict()
        return self.dispatcher.get(OK, params, *path, "archive", stream=True)


def _repo(project_id: ProjectId) -> tuple:
    return ("projects", require("project_id", project_id), "repository")


def _resolve_release_notes(release_notes: ReleaseNotes) -> str | None:
    if release_notes is None or isinstance(release_notes, str):
        return release_notes
    try:
        with open(release_notes, encoding="utf-8") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ReleaseNotesReadError(
            f"Cannot read release notes from {os.fspath(release_notes)}: {exc}", cause=exc
        ) from exc
