"""Tests for tree_builder module."""

from LabRepo.models import TreeItem, TreeItemType
from LabRepo.tree_builder import build_tree


def _blob(path: str) -> TreeItem:
    return TreeItem(id=f"sha-{path}", name=path.rsplit("/", 1)[-1], type=TreeItemType.BLOB, path=path)


def _dir(path: str) -> TreeItem:
    return TreeItem(id=f"sha-{path}", name=path.rsplit("/", 1)[-1], type=TreeItemType.TREE, path=path)


class TestBuildTree:
    def test_empty(self):
        assert build_tree([]) == ""

    def test_single_file(self):
        result = build_tree([_blob("README.md")])
        assert result == "└── README.md"

    def test_flat_files(self):
        result = build_tree([_blob("LICENSE"), _blob("README.md")])
        lines = result.split("\n")
        assert lines[0] == "├── LICENSE"
        assert lines[1] == "└── README.md"

    def test_nested_structure(self):
        items = [
            _dir("src"),
            _blob("src/main.py"),
            _blob("src/utils.py"),
            _blob("README.md"),
        ]
        lines = build_tree(items).split("\n")
        assert lines == [
            "├── README.md",
            "└── src/",
            "    ├── main.py",
            "    └── utils.py",
        ]

    def test_empty_directory_keeps_slash(self):
        """A non-recursive listing returns directories without children."""
        result = build_tree([_dir("docs"), _blob("setup.cfg")])
        lines = result.split("\n")
        assert lines[0] == "├── docs/"
        assert lines[1] == "└── setup.cfg"

    def test_deep_nesting_without_tree_items(self):
        result = build_tree([_blob("a/b/c/d.txt")])
        assert "└── a/" in result
        assert "    └── b/" in result
        assert "        └── c/" in result
        assert "            └── d.txt" in result

    def test_sorted_output(self):
        result = build_tree([_blob("z.txt"), _blob("a.txt"), _blob("m.txt")])
        lines = result.split("\n")
        assert "a.txt" in lines[0]
        assert "m.txt" in lines[1]
        assert "z.txt" in lines[2]
