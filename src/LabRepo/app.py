"""Streamlit UI for LabRepo."""

from __future__ import annotations

import logging
from pathlib import Path

import streamlit as st

from LabRepo import token_store
from LabRepo.config import Settings, get_settings
from LabRepo.errors import GitLabApiError, TransportError
from LabRepo.gitlab_client import GitLabClient
from LabRepo.models import ProjectRef
from LabRepo.repository_api import RepositoryApi
from LabRepo.tree_builder import build_tree
from LabRepo.url_parser import URLParseError, parse_project_url


def _qp(key: str, default: str = "") -> str:
    """Read a query parameter, returning *default* if absent."""
    params = st.query_params
    return params.get(key, default)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    st.set_page_config(page_title="LabRepo", layout="wide")

    # --- Header with settings popover ---
    header_left, header_right = st.columns([8, 1])
    with header_left:
        st.title("LabRepo")
    with header_right:
        st.markdown("<div style='height: 1.5rem'></div>", unsafe_allow_html=True)
        settings_popover = st.popover("⚙", use_container_width=True)

    st.caption("Browse and manage the branches, tags and files of a GitLab repository.")

    url = st.text_input(
        "Project URL",
        value=_qp("url"),
        placeholder="https://gitlab.com/group/project",
    )
    project = None
    url_error = None
    if url:
        try:
            project = parse_project_url(url)
        except URLParseError as exc:
            url_error = exc

    # Tokens are stored per GitLab instance.
    instance_url = project.base_url if project else settings.gitlab_url
    with settings_popover:
        token, archive_dir = _settings_panel(settings, instance_url)

    if url_error is not None:
        st.error(f"Invalid URL: {url_error}")
        return
    if project is None:
        return

    client = GitLabClient(
        base_url=project.base_url,
        token=token.strip() or None,
        api_version=settings.api_version,
        timeout=settings.request_timeout,
    )
    api = RepositoryApi(
        client,
        default_archive_dir=archive_dir.strip() or settings.default_archive_dir,
        chunk_size=settings.archive_chunk_size,
    )

    branches_tab, tags_tab, tree_tab, file_tab, archive_tab = st.tabs(
        ["Branches", "Tags", "Tree", "File", "Archive"]
    )
    with branches_tab:
        _run(_branches_tab, api, project)
    with tags_tab:
        _run(_tags_tab, api, project)
    with tree_tab:
        _run(_tree_tab, api, project)
    with file_tab:
        _run(_file_tab, api, project)
    with archive_tab:
        _run(_archive_tab, api, project)


def _settings_panel(settings: Settings, instance_url: str) -> tuple[str, str]:
    """Render the settings popover; return (token, archive directory)."""
    st.subheader("Settings")

    saved_token = token_store.load(instance_url) or ""
    env_token = settings.gitlab_token.get_secret_value() if settings.gitlab_token else ""
    token = st.text_input(
        "GitLab Token (optional)",
        value=saved_token or env_token,
        type="password",
        help="Personal access token. Required for private projects and for write operations.",
    )

    if token_store.is_available():
        remember = st.checkbox(
            "Save token to OS keychain for this GitLab instance",
            value=bool(saved_token),
        )
        if remember and token:
            token_store.save(instance_url, token)
        elif saved_token and (not remember or not token):
            token_store.delete(instance_url)

    archive_dir = st.text_input(
        "Archive directory",
        value=str(settings.default_archive_dir),
        help="Where downloaded archives are saved before being offered for download.",
    )
    return token, archive_dir


def _run(tab, api: RepositoryApi, project: ProjectRef) -> None:
    """Render a tab, turning API failures into error messages."""
    try:
        tab(api, project)
    except TransportError as exc:
        st.error(str(exc))
        if exc.status_code in (401, 403):
            st.info("Tip: Add a GitLab token in Settings (⚙).")
    except GitLabApiError as exc:
        st.error(str(exc))


def _branches_tab(api: RepositoryApi, project: ProjectRef) -> None:
    branches = api.get_branches(project.path)
    st.dataframe(
        [
            {
                "name": b.name,
                "protected": b.protected,
                "merged": b.merged,
                "commit": b.commit.id[:8] if b.commit else "",
                "message": b.commit.message.splitlines()[0] if b.commit and b.commit.message else "",
            }
            for b in branches
        ],
        use_container_width=True,
    )

    names = [b.name for b in branches]
    with st.expander("Create branch"):
        new_name = st.text_input("Branch name", key="new_branch")
        source = st.text_input("From ref", value=project.ref or "", key="new_branch_ref")
        if st.button("Create", key="create_branch"):
            branch = api.create_branch(project.path, new_name, source)
            st.success(f"Created branch {branch.name}.")

    if not names:
        return
    with st.expander("Manage branch"):
        selected = st.selectbox("Branch", names, key="manage_branch")
        col_protect, col_unprotect, col_delete = st.columns(3)
        if col_protect.button("Protect", use_container_width=True):
            branch = api.protect_branch(project.path, selected)
            st.success(f"{branch.name} is protected.")
        if col_unprotect.button("Unprotect", use_container_width=True):
            branch = api.unprotect_branch(project.path, selected)
            st.success(f"{branch.name} is unprotected.")
        if col_delete.button("Delete", type="primary", use_container_width=True):
            api.delete_branch(project.path, selected)
            st.success(f"Deleted branch {selected}.")


def _tags_tab(api: RepositoryApi, project: ProjectRef) -> None:
    tags = api.get_tags(project.path)
    st.dataframe(
        [
            {
                "name": t.name,
                "message": t.message or "",
                "commit": t.commit.id[:8] if t.commit else "",
                "release": t.release.description if t.release else "",
            }
            for t in tags
        ],
        use_container_width=True,
    )

    with st.expander("Create tag"):
        tag_name = st.text_input("Tag name", key="new_tag")
        ref = st.text_input("Ref", value=project.ref or "", key="new_tag_ref")
        message = st.text_input("Message (optional)", key="new_tag_message")
        notes = st.text_area("Release notes (optional)", key="new_tag_notes")
        notes_file = st.text_input(
            "…or release notes file path (optional)", key="new_tag_notes_file"
        )
        if st.button("Create tag"):
            release_notes = Path(notes_file) if notes_file.strip() else (notes or None)
            tag = api.create_tag(project.path, tag_name, ref, message or None, release_notes)
            st.success(f"Created tag {tag.name}.")

    if tags:
        with st.expander("Delete tag"):
            selected = st.selectbox("Tag", [t.name for t in tags], key="delete_tag")
            if st.button("Delete tag", type="primary"):
                api.delete_tag(project.path, selected)
                st.success(f"Deleted tag {selected}.")


def _tree_tab(api: RepositoryApi, project: ProjectRef) -> None:
    col_path, col_ref, col_recursive = st.columns([4, 3, 1])
    path = col_path.text_input("Path", value="/", key="tree_path")
    ref = col_ref.text_input("Ref", value=project.ref or "", key="tree_ref")
    recursive = col_recursive.checkbox("Recursive", key="tree_recursive")

    if st.button("List", key="tree_list"):
        items = api.get_tree(project.path, path or None, ref or None, recursive)
        if not items:
            st.warning("No entries found.")
            return
        st.code(build_tree(items), language="text")


def _file_tab(api: RepositoryApi, project: ProjectRef) -> None:
    mode = st.radio("Look up by", ["Path at ref", "Blob SHA"], horizontal=True)
    if mode == "Path at ref":
        ref = st.text_input("Ref", value=project.ref or "", key="file_ref")
        filepath = st.text_input("File path", key="file_path")
        if st.button("Show", key="show_file"):
            content = api.get_raw_file_content(project.path, ref, filepath)
            st.code(content, language=None)
    else:
        sha = st.text_input("Blob SHA", key="blob_sha")
        if st.button("Show", key="show_blob"):
            content = api.get_raw_blob_content(project.path, sha)
            st.code(content, language=None)


def _archive_tab(api: RepositoryApi, project: ProjectRef) -> None:
    sha = st.text_input(
        "Commit SHA (optional)",
        help="Leave empty for the default branch.",
        key="archive_sha",
    )
    if st.button("Download archive", type="primary", use_container_width=True):
        with st.spinner("Downloading archive..."):
            path = api.save_repository_archive(project.path, sha or None)
        st.session_state["archive"] = str(path)

    # Show previous result after rerun (e.g. download button click)
    saved = st.session_state.get("archive")
    if saved and Path(saved).exists():
        archive = Path(saved)
        st.info(f"Saved to {archive}")
        st.download_button(
            label=f"Save {archive.name}",
            data=archive.read_bytes(),
            file_name=archive.name,
            mime="application/octet-stream",
            use_container_width=True,
        )


if __name__ == "__main__":
    main()
