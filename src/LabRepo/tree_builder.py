"""ASCII tree builder for repository tree listings."""

from __future__ import annotations

from LabRepo.models import TreeItem


def build_tree(items: list[TreeItem]) -> str:
    """Build an ASCII directory tree from a tree listing.

    Directories (``tree`` items) get a trailing ``/`` even when the listing
    holds nothing below them, e.g. for a non-recursive listing.

    Example output:
        ├── src/
        │   ├── main.py
        │   └── utils.py
        └── README.md
    """
    if not items:
        return ""

    # Nested dict of name -> (is_dir, children)
    tree: dict = {}
    for item in sorted(items, key=lambda i: i.path):
        parts = item.path.strip("/").split("/")
        node = tree
        for i, part in enumerate(parts):
            is_last = i == len(parts) - 1
            is_dir, children = node.get(part, (False, {}))
            if not is_last or item.is_dir:
                is_dir = True
            node[part] = (is_dir, children)
            node = children

    lines: list[str] = []
    _render_tree(tree, lines, prefix="")
    return "\n".join(lines)


def _render_tree(
    tree: dict,
    lines: list[str],
    prefix: str,
) -> None:
    """Recursively render the tree into lines."""
    entries = list(tree.items())
    for i, (name, (is_dir, children)) in enumerate(entries):
        is_last = i == len(entries) - 1
        connector = "└── " if is_last else "├── "

        display_name = f"{name}/" if is_dir else name
        lines.append(f"{prefix}{connector}{display_name}")

        if children:
            extension = "    " if is_last else "│   "
            _render_tree(children, lines, prefix + extension)
