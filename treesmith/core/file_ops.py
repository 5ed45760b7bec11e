"""
Treesmith Core: File Operations.

Thin wrappers around filesystem calls that translate OSError into
FileOperationError with the offending path attached:
- read_file / write_file for template content
- list_directory for deterministic directory enumeration
- create_directory for destination scaffolding
- count_files for sizing progress reports
"""
import errno
import os
from pathlib import Path
from typing import List, Optional, Union

from treesmith.core.constants import ErrorCode, Limits, TreesmithError

PathLike = Union[str, os.PathLike]


class FileOperationError(TreesmithError):
    """I/O failure attributed to a specific path."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        path: Optional[PathLike] = None,
    ):
        super().__init__(message, error_code)
        self.path = Path(path) if path is not None else None


class SourceNotDirectoryError(FileOperationError):
    """The root of a tree walk is missing or is not a directory."""

    def __init__(self, path: PathLike):
        super().__init__(f"Source path is not a directory: {path}", ErrorCode.NOT_FOUND, path)


def _error_code_for(exc: OSError) -> ErrorCode:
    if exc.errno in (errno.ENOENT, errno.ENOTDIR):
        return ErrorCode.NOT_FOUND
    if exc.errno in (errno.EACCES, errno.EPERM):
        return ErrorCode.PERMISSION_DENIED
    if exc.errno in (errno.EEXIST, errno.EISDIR):
        return ErrorCode.CONFLICT
    return ErrorCode.INTERNAL_ERROR


def decode_content(data: bytes) -> str:
    """Decode file bytes so that any byte sequence survives a round trip."""
    return data.decode(Limits.CONTENT_ENCODING, Limits.CONTENT_ERRORS)


def encode_content(content: str) -> bytes:
    """Inverse of decode_content."""
    return content.encode(Limits.CONTENT_ENCODING, Limits.CONTENT_ERRORS)


def read_file(path: PathLike, size_limit: int = Limits.MAX_FILE_SIZE) -> str:
    """Read a whole file as text.

    Args:
        path: File to read
        size_limit: Maximum accepted size in bytes

    Returns:
        Decoded file content

    Raises:
        FileOperationError: If the file cannot be read or is too large
    """
    try:
        size = os.path.getsize(path)
        if size > size_limit:
            raise FileOperationError(
                f"File size {size} exceeds limit {size_limit}: {path}",
                ErrorCode.INVALID_INPUT,
                path,
            )
        with open(path, "rb") as f:
            return decode_content(f.read())
    except OSError as e:
        raise FileOperationError(
            f"Failed to read file {path}: {e.strerror or e}", _error_code_for(e), path
        ) from e


def write_file(path: PathLike, content: str) -> None:
    """Write text to a file, creating missing parent directories first.

    Raises:
        FileOperationError: If a directory or the file cannot be created
    """
    target = Path(path)
    create_directory(target.parent)
    try:
        with open(target, "wb") as f:
            f.write(encode_content(content))
    except OSError as e:
        raise FileOperationError(
            f"Failed to write file {target}: {e.strerror or e}", _error_code_for(e), target
        ) from e


def create_directory(path: PathLike) -> bool:
    """Create a directory and its parents.

    Returns:
        True if the directory did not exist before
    """
    target = Path(path)
    if target.is_dir():
        return False
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(
            f"Failed to create directory {target}: {e.strerror or e}", _error_code_for(e), target
        ) from e
    return True


def list_directory(path: PathLike) -> List[os.DirEntry]:
    """List directory entries sorted by name."""
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise FileOperationError(
            f"Failed to read directory {path}: {e.strerror or e}", _error_code_for(e), path
        ) from e


def count_files(path: PathLike) -> int:
    """Recursively count regular files under a directory."""
    if not os.path.isdir(path):
        raise SourceNotDirectoryError(path)

    count = 0
    for entry in list_directory(path):
        if entry.is_dir():
            count += count_files(entry.path)
        elif entry.is_file():
            count += 1
    return count
