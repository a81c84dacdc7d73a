"""Tests for shared utilities."""

from __future__ import annotations

import os

import pytest

import devsweep.utils as utils
from devsweep.utils import bytes_to_human, dir_info, dir_size
from tests.conftest import write_file


@pytest.fixture
def sample_tree(tmp_path):
    root = tmp_path / "tree"
    write_file(root / "a.bin", 100)
    write_file(root / "sub" / "b.bin", 200)
    write_file(root / "sub" / "deep" / "c.bin", 300)
    (root / "empty").mkdir()
    outside = write_file(tmp_path / "outside.bin", 5000)
    os.symlink(outside, root / "link.bin")
    os.symlink(tmp_path, root / "dirlink")
    return root


class TestDirInfo:
    def test_counts_regular_files_only(self, sample_tree):
        assert dir_info(sample_tree) == (600, 3)

    def test_scandir_fallback_matches(self, sample_tree, monkeypatch):
        def no_find(_path):
            raise OSError("find not available")

        monkeypatch.setattr(utils, "_dir_info_find", no_find)
        assert dir_info(sample_tree) == (600, 3)

    def test_missing_directory_is_empty(self, tmp_path):
        assert dir_info(tmp_path / "nope") == (0, 0)

    def test_three_level_tree(self, tmp_path):
        root = tmp_path / "levels"
        layout = ["a", "b", "c", "x/d", "x/e", "x/f", "x/y/g", "x/y/h", "x/y/i", "x/y/j"]
        for rel in layout:
            write_file(root / rel, 1024)
        assert dir_info(root) == (10240, 10)

    def test_dir_size(self, sample_tree):
        assert dir_size(sample_tree) == 600


class TestBytesToHuman:
    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 B"),
            (512, "512 B"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (5 * 1024**3, "5.0 GB"),
            (3 * 1024**4, "3.0 TB"),
            (-2048, "-2.0 KB"),
        ],
    )
    def test_format(self, size, expected):
        assert bytes_to_human(size) == expected

