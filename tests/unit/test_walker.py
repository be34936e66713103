"""Tests for recursive font file discovery."""

import os

import pytest

from fontfinder.fonts.walker import walk_files


class TestWalkFiles:
    """Test walk_files."""

    @pytest.fixture
    def tree(self, temp_dir):
        root = temp_dir / "root"
        (root / "a" / "b").mkdir(parents=True)
        (root / "top.TTF").write_bytes(b"x")
        (root / "a" / "inner.otf").write_bytes(b"x")
        (root / "a" / "b" / "deep.ttc").write_bytes(b"x")
        (root / "a" / "notes.txt").write_text("not a font")
        return root

    def test_finds_matching_extensions_recursively(self, tree):
        """Extensions match case-insensitively at any depth."""
        found = walk_files([str(tree)], [".ttf", ".otf", ".ttc"])

        names = sorted(os.path.basename(p) for p in found)
        assert names == ["deep.ttc", "inner.otf", "top.TTF"]

    def test_returns_absolute_paths(self, tree):
        found = walk_files([str(tree)], [".otf"])
        assert all(os.path.isabs(p) for p in found)

    def test_missing_root_is_skipped(self, tree, temp_dir):
        """Missing directories contribute nothing and raise nothing."""
        found = walk_files([str(temp_dir / "missing"), str(tree)], [".otf"])
        assert [os.path.basename(p) for p in found] == ["inner.otf"]

    def test_no_roots(self):
        assert walk_files([], [".ttf"]) == []

    def test_symlinks_are_not_followed(self, tree, temp_dir):
        """Linked directories and linked files are ignored."""
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "linked.ttf").write_bytes(b"x")
        try:
            os.symlink(outside, tree / "dir-link")
            os.symlink(outside / "linked.ttf", tree / "file-link.ttf")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        found = walk_files([str(tree)], [".ttf"])
        assert [os.path.basename(p) for p in found] == ["top.TTF"]
