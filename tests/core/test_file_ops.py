#!/usr/bin/env python3
"""Tests for file operation wrappers."""

import os

import pytest

from treesmith.core.constants import ErrorCode
from treesmith.core.file_ops import (
    FileOperationError,
    SourceNotDirectoryError,
    count_files,
    create_directory,
    decode_content,
    encode_content,
    list_directory,
    read_file,
    write_file,
)


class TestContentCodec:
    """Tests for decode_content / encode_content."""

    def test_utf8_text(self):
        """Test UTF-8 text decodes normally."""
        assert decode_content("héllo".encode("utf-8")) == "héllo"

    def test_invalid_bytes_survive(self):
        """Test undecodable bytes are restored on encode."""
        data = b"\xff\xfe plain \x80"
        assert encode_content(decode_content(data)) == data


class TestReadWrite:
    """Tests for read_file and write_file."""

    def test_write_creates_parents(self, temp_dir):
        """Test missing parent directories are created."""
        target = temp_dir / "a" / "b" / "c.txt"
        write_file(target, "content")
        assert target.read_text() == "content"

    def test_read_file(self, temp_dir):
        """Test reading a file returns its text."""
        path = temp_dir / "x.txt"
        path.write_text("data")
        assert read_file(path) == "data"

    def test_read_missing_file(self, temp_dir):
        """Test missing files raise NOT_FOUND with the path."""
        path = temp_dir / "missing.txt"
        with pytest.raises(FileOperationError) as exc_info:
            read_file(path)
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND
        assert exc_info.value.path == path

    def test_read_size_limit(self, temp_dir):
        """Test files over the size limit are rejected."""
        path = temp_dir / "big.txt"
        path.write_text("0123456789")
        with pytest.raises(FileOperationError) as exc_info:
            read_file(path, size_limit=5)
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    def test_write_over_directory(self, temp_dir):
        """Test writing onto a directory fails."""
        (temp_dir / "dir").mkdir()
        with pytest.raises(FileOperationError):
            write_file(temp_dir / "dir", "x")

    def test_write_overwrites(self, temp_dir):
        """Test existing files are replaced."""
        path = temp_dir / "x.txt"
        path.write_text("old content")
        write_file(path, "new")
        assert path.read_text() == "new"


class TestDirectories:
    """Tests for directory helpers."""

    def test_create_directory(self, temp_dir):
        """Test create_directory reports whether it created anything."""
        target = temp_dir / "a" / "b"
        assert create_directory(target) is True
        assert target.is_dir()
        assert create_directory(target) is False

    def test_create_directory_over_file(self, temp_dir):
        """Test a file in the way raises FileOperationError."""
        (temp_dir / "f").write_text("x")
        with pytest.raises(FileOperationError):
            create_directory(temp_dir / "f")

    def test_list_directory_sorted(self, temp_dir):
        """Test entries come back sorted by name."""
        for name in ["b", "c", "a"]:
            (temp_dir / name).write_text(name)
        assert [entry.name for entry in list_directory(temp_dir)] == ["a", "b", "c"]

    def test_list_missing_directory(self, temp_dir):
        """Test listing a missing directory raises."""
        with pytest.raises(FileOperationError):
            list_directory(temp_dir / "missing")

    def test_count_files(self, source_dir):
        """Test files are counted recursively, directories are not."""
        assert count_files(source_dir) == 5

    def test_count_files_not_directory(self, temp_dir):
        """Test counting a non-directory raises SourceNotDirectoryError."""
        path = temp_dir / "x.txt"
        path.write_text("x")
        with pytest.raises(SourceNotDirectoryError) as exc_info:
            count_files(path)
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_count_follows_symlinked_files(self, temp_dir):
        """Test symlinks to files are counted as files."""
        (temp_dir / "real.txt").write_text("x")
        os.symlink(temp_dir / "real.txt", temp_dir / "link.txt")
        assert count_files(temp_dir) == 2
