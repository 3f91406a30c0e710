"""An in-memory hierarchical filesystem with per-entry attributes."""

from __future__ import annotations

import enum
import errno
import os
from dataclasses import dataclass, field
from typing import Callable, Iterator

_MAX_ATTRIBUTE_NUMBER = 0xFF

_Key = tuple[str, ...]


class FileType(enum.Enum):
    """Whether a directory entry is a file or a directory."""

    FILE = enum.auto()
    DIR = enum.auto()

    @property
    def is_file(self) -> bool:
        return self is FileType.FILE

    @property
    def is_dir(self) -> bool:
        return self is FileType.DIR


@dataclass(frozen=True)
class DirEntry:
    """One entry yielded while reading a directory."""

    file_name: str
    path: str
    file_type: FileType
    size: int = 0


class FilesystemError(OSError):
    """A filesystem operation failed; ``errno`` tells why."""

    def __init__(self, code: int, path: str) -> None:
        super().__init__(code, os.strerror(code), path)


@dataclass
class _Node:
    file_type: FileType
    data: bytes = b""
    attributes: dict[int, bytes] = field(default_factory=dict)


def _split(path: str) -> _Key:
    parts: list[str] = []
    for component in path.split("/"):
        if component in ("", "."):
            continue
        if component == "..":
            if parts:
                parts.pop()
            continue
        parts.append(component)
    return tuple(parts)


def _join(path: str, name: str) -> str:
    base = path.rstrip("/")
    if not base:
        return ("/" if path.startswith("/") else "") + name
    return f"{base}/{name}"


class Filesystem:
    """A directory tree held in memory.

    Paths are separated by ``/``; a leading ``/`` is optional and every path
    is resolved from the root. Reading a directory yields ``.`` and ``..``
    first, then the children in name order.
    """

    def __init__(self) -> None:
        self._nodes: dict[_Key, _Node] = {}
        self.format()

    def format(self) -> None:
        """Erase everything, leaving only an empty root directory."""
        self._nodes = {(): _Node(FileType.DIR)}

    def _node(self, path: str) -> _Node:
        node = self._nodes.get(_split(path))
        if node is None:
            raise FilesystemError(errno.ENOENT, path)
        return node

    def _check_parent(self, key: _Key, path: str) -> None:
        parent = self._nodes.get(key[:-1])
        if parent is None:
            raise FilesystemError(errno.ENOENT, path)
        if not parent.file_type.is_dir:
            raise FilesystemError(errno.ENOTDIR, path)

    def _children(self, key: _Key) -> list[str]:
        depth = len(key)
        return sorted(
            other[-1]
            for other in self._nodes
            if len(other) == depth + 1 and other[:depth] == key
        )

    def create_dir(self, path: str) -> None:
        """Create a directory whose parent already exists."""
        key = _split(path)
        if key in self._nodes:
            raise FilesystemError(errno.EEXIST, path)
        self._check_parent(key, path)
        self._nodes[key] = _Node(FileType.DIR)

    def write(self, path: str, contents: bytes) -> None:
        """Create or overwrite a file; its attributes are kept."""
        key = _split(path)
        if not key:
            raise FilesystemError(errno.EISDIR, path)
        existing = self._nodes.get(key)
        if existing is not None:
            if existing.file_type.is_dir:
                raise FilesystemError(errno.EISDIR, path)
            existing.data = bytes(contents)
            return
        self._check_parent(key, path)
        self._nodes[key] = _Node(FileType.FILE, bytes(contents))

    def read(self, path: str) -> bytes:
        """Return the whole contents of a file."""
        node = self._node(path)
        if node.file_type.is_dir:
            raise FilesystemError(errno.EISDIR, path)
        return node.data

    def remove(self, path: str) -> None:
        """Remove a file or an empty directory."""
        key = _split(path)
        node = self._node(path)
        if not key:
            raise FilesystemError(errno.EBUSY, path)
        if node.file_type.is_dir and self._children(key):
            raise FilesystemError(errno.ENOTEMPTY, path)
        del self._nodes[key]

    def remove_dir(self, path: str) -> None:
        """Remove an empty directory (or a file, as ``remove`` does)."""
        self.remove(path)

    def remove_dir_all_where(
        self, path: str, predicate: Callable[[DirEntry], bool]
    ) -> int:
        """Remove files below ``path`` that satisfy ``predicate``.

        Subdirectories are walked recursively; a directory left empty is
        removed as well. Returns the number of files removed, and 0 if
        ``path`` does not exist.
        """
        key = _split(path)
        if key not in self._nodes:
            return 0
        removed = 0
        for entry in list(self.read_dir(path))[2:]:
            if entry.file_type.is_file:
                if predicate(entry):
                    self.remove(entry.path)
                    removed += 1
            else:
                removed += self.remove_dir_all_where(entry.path, predicate)
        if key and not self._children(key):
            self.remove_dir(path)
        return removed

    def exists(self, path: str) -> bool:
        """Whether a file or directory exists at ``path``."""
        return _split(path) in self._nodes

    def read_dir(self, path: str) -> Iterator[DirEntry]:
        """Iterate over a snapshot of a directory's entries."""
        key = _split(path)
        node = self._node(path)
        if not node.file_type.is_dir:
            raise FilesystemError(errno.ENOTDIR, path)
        entries = [
            DirEntry(".", _join(path, "."), FileType.DIR),
            DirEntry("..", _join(path, ".."), FileType.DIR),
        ]
        for name in self._children(key):
            child = self._nodes[key + (name,)]
            entries.append(
                DirEntry(name, _join(path, name), child.file_type, len(child.data))
            )
        return iter(entries)

    def set_attribute(self, path: str, number: int, data: bytes) -> None:
        """Attach user attribute ``number`` to an existing entry."""
        if not 0 <= number <= _MAX_ATTRIBUTE_NUMBER:
            raise ValueError("attribute number must be in the range 0..255")
        self._node(path).attributes[number] = bytes(data)

    def attribute(self, path: str, number: int) -> bytes | None:
        """Return user attribute ``number`` of an entry, or None if unset."""
        if not 0 <= number <= _MAX_ATTRIBUTE_NUMBER:
            raise ValueError("attribute number must be in the range 0..255")
        return self._node(path).attributes.get(number)