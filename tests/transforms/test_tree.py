#!/usr/bin/env python3
"""Tests for the tree walk and verdict application."""

from pathlib import Path

import pytest

from treesmith.core.file_ops import FileOperationError, SourceNotDirectoryError
from treesmith.transforms.base import FileTransformContext, FileTransformVerdict
from treesmith.transforms.tree import TreeTransformer, apply_verdict, transform_tree


def relative_files(root: Path):
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


class TestApplyVerdict:
    """Tests for apply_verdict."""

    @pytest.fixture
    def ctx(self, temp_dir):
        return FileTransformContext(
            origin_path=temp_dir / "src" / "a.txt",
            target_path=temp_dir / "out" / "sub" / "a.txt",
            content="original",
            relative_path="a.txt",
        )

    def test_skip(self, ctx):
        """Test SKIP writes nothing."""
        assert apply_verdict(FileTransformVerdict.skip(), ctx) is None
        assert not ctx.target_path.exists()

    def test_no_change(self, ctx):
        """Test NO_CHANGE writes the original content, creating parents."""
        written = apply_verdict(FileTransformVerdict.no_change(), ctx)
        assert written == ctx.target_path
        assert written.read_text() == "original"

    def test_transform(self, ctx):
        """Test TRANSFORM writes new content at the mirrored path."""
        apply_verdict(FileTransformVerdict.transform("new"), ctx)
        assert ctx.target_path.read_text() == "new"

    def test_rename(self, ctx):
        """Test RENAME writes the original content under a new name."""
        written = apply_verdict(FileTransformVerdict.rename("b.txt"), ctx)
        assert written == ctx.target_path.with_name("b.txt")
        assert written.read_text() == "original"
        assert not ctx.target_path.exists()

    def test_overwrite(self, ctx):
        """Test OVERWRITE writes new content under a new name."""
        written = apply_verdict(FileTransformVerdict.overwrite("new", "b.txt"), ctx)
        assert written.read_text() == "new"
        assert written.parent == ctx.target_path.parent


class TestTransformTree:
    """Tests for transform_tree."""

    def test_identity_copy(self, source_dir, dest_dir, logger):
        """Test the default handler copies every file unchanged."""
        summary = transform_tree(source_dir, dest_dir, logger=logger)

        assert relative_files(dest_dir) == relative_files(source_dir)
        for rel in relative_files(source_dir):
            assert (dest_dir / rel).read_bytes() == (source_dir / rel).read_bytes()
        assert summary.files_visited == 5
        assert summary.files_processed == 5
        assert summary.files_skipped == 0

    def test_empty_directories_recreated(self, source_dir, dest_dir, logger):
        """Test empty source directories exist in the destination."""
        transform_tree(source_dir, dest_dir, logger=logger)
        assert (dest_dir / "empty").is_dir()
        assert (dest_dir / "docs" / "drafts").is_dir()

    def test_binary_content_round_trips(self, temp_dir, dest_dir, logger):
        """Test non-UTF-8 bytes are copied exactly."""
        source = temp_dir / "bin"
        source.mkdir()
        payload = bytes(range(256))
        (source / "blob.bin").write_bytes(payload)

        transform_tree(source, dest_dir, logger=logger)
        assert (dest_dir / "blob.bin").read_bytes() == payload

    def test_relative_paths_and_order(self, source_dir, dest_dir, logger):
        """Test the handler sees sorted, forward-slash relative paths."""
        seen = []

        def handler(ctx):
            seen.append(ctx.relative_path)
            return FileTransformVerdict.no_change()

        transform_tree(source_dir, dest_dir, handler, logger)
        assert seen == ["README.md", "hello.txt", "secret.key", "src/config.yaml.j2", "src/main.py"]

    def test_context_paths(self, source_dir, dest_dir, logger):
        """Test origin and target paths mirror each other."""
        contexts = []

        def handler(ctx):
            contexts.append(ctx)
            return FileTransformVerdict.no_change()

        transform_tree(source_dir, dest_dir, handler, logger)
        main = next(ctx for ctx in contexts if ctx.relative_path == "src/main.py")
        assert main.origin_path == source_dir / "src" / "main.py"
        assert main.target_path == dest_dir / "src" / "main.py"
        assert main.content == "print('{{name}}')\n"

    def test_skip_everything(self, source_dir, dest_dir, logger):
        """Test skipping every file writes no files."""
        summary = transform_tree(source_dir, dest_dir, lambda ctx: FileTransformVerdict.skip(), logger)
        assert relative_files(dest_dir) == []
        assert summary.files_processed == 0
        assert summary.files_skipped == 5

    def test_mixed_verdicts(self, source_dir, dest_dir, logger):
        """Test each verdict kind is applied per file."""

        def handler(ctx):
            if ctx.relative_path == "secret.key":
                return FileTransformVerdict.skip()
            if ctx.relative_path == "hello.txt":
                return FileTransformVerdict.transform(ctx.content.upper())
            if ctx.relative_path == "README.md":
                return FileTransformVerdict.rename("README.rst")
            if ctx.relative_path.endswith(".j2"):
                return FileTransformVerdict.overwrite("rendered", "config.yaml")
            return FileTransformVerdict.no_change()

        transform_tree(source_dir, dest_dir, handler, logger)
        assert relative_files(dest_dir) == ["README.rst", "hello.txt", "src/config.yaml", "src/main.py"]
        assert (dest_dir / "hello.txt").read_text() == "HELLO {{NAME}}"
        assert (dest_dir / "src" / "config.yaml").read_text() == "rendered"

    def test_existing_destination(self, source_dir, dest_dir, logger):
        """Test an existing destination is written into."""
        dest_dir.mkdir()
        (dest_dir / "keep.txt").write_text("keep")
        transform_tree(source_dir, dest_dir, logger=logger)
        assert (dest_dir / "keep.txt").read_text() == "keep"
        assert (dest_dir / "hello.txt").exists()

    def test_directories_created_counter(self, source_dir, dest_dir, logger):
        """Test the root and empty directories are counted."""
        summary = transform_tree(source_dir, dest_dir, logger=logger)
        # output/, empty/ and docs/drafts/; src/ is created by its file writes
        assert summary.directories_created == 3

    def test_source_not_directory(self, temp_dir, dest_dir, logger):
        """Test a file source fails before anything is written."""
        source = temp_dir / "file.txt"
        source.write_text("x")
        with pytest.raises(SourceNotDirectoryError) as exc_info:
            transform_tree(source, dest_dir, logger=logger)
        assert exc_info.value.path == source
        assert not dest_dir.exists()

    def test_missing_source(self, temp_dir, dest_dir, logger):
        """Test a missing source raises SourceNotDirectoryError."""
        with pytest.raises(SourceNotDirectoryError):
            transform_tree(temp_dir / "missing", dest_dir, logger=logger)

    def test_handler_errors_propagate(self, source_dir, dest_dir, logger):
        """Test the first handler error aborts the walk."""

        def handler(ctx):
            raise FileOperationError("boom", path=ctx.origin_path)

        with pytest.raises(FileOperationError, match="boom"):
            transform_tree(source_dir, dest_dir, handler, logger)

    def test_transformer_summary_attribute(self, source_dir, dest_dir, logger):
        """Test the summary is available on the transformer."""
        transformer = TreeTransformer(source_dir, dest_dir, logger=logger)
        summary = transformer.run()
        assert transformer.summary is summary

    def test_completion_logged(self, source_dir, dest_dir, logger, log_handler):
        """Test the walk logs its start and completion."""
        transform_tree(source_dir, dest_dir, logger=logger)
        assert any(message.startswith("Transform complete") for message in log_handler.messages)
