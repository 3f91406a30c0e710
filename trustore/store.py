"""A combined view of the internal, external and volatile filesystems."""

from __future__ import annotations

import errno
from typing import Callable

from trustore.fs import DirEntry, Filesystem, FilesystemError
from trustore.types import ErrorKind, Location, TrussedError


class Store:
    """Three filesystems, one per :class:`Location`."""

    def __init__(
        self,
        internal: Filesystem | None = None,
        external: Filesystem | None = None,
        volatile: Filesystem | None = None,
    ) -> None:
        self._filesystems = {
            Location.INTERNAL: internal if internal is not None else Filesystem(),
            Location.EXTERNAL: external if external is not None else Filesystem(),
            Location.VOLATILE: volatile if volatile is not None else Filesystem(),
        }

    def fs(self, location: Location) -> Filesystem:
        """Return the filesystem that backs ``location``."""
        return self._filesystems[location]


def create_directories(fs: Filesystem, path: str) -> None:
    """Create every directory leading up to the last component of ``path``."""
    for index, char in enumerate(path):
        if char != "/":
            continue
        try:
            fs.create_dir(path[:index])
        except FilesystemError as error:
            if error.errno != errno.EEXIST:
                raise


def read(
    store: Store, location: Location, path: str, capacity: int | None = None
) -> bytes:
    """Read a file, failing if it is missing or longer than ``capacity``."""
    try:
        data = store.fs(location).read(path)
    except FilesystemError as error:
        raise TrussedError(ErrorKind.FILESYSTEM_READ_FAILURE) from error
    if capacity is not None and len(data) > capacity:
        raise TrussedError(ErrorKind.FILESYSTEM_READ_FAILURE)
    return data


def write(store: Store, location: Location, path: str, contents: bytes) -> None:
    """Write a file whose parent directory exists."""
    try:
        store.fs(location).write(path, contents)
    except FilesystemError as error:
        raise TrussedError(ErrorKind.FILESYSTEM_WRITE_FAILURE) from error


def store_data(store: Store, location: Location, path: str, contents: bytes) -> None:
    """Create the parent directories if necessary, then write."""
    create_directories(store.fs(location), path)
    write(store, location, path, contents)


def delete(store: Store, location: Location, path: str) -> bool:
    """Remove a file; report whether it succeeded."""
    try:
        store.fs(location).remove(path)
    except FilesystemError:
        return False
    return True


def exists(store: Store, location: Location, path: str) -> bool:
    """Whether anything exists at ``path``."""
    return store.fs(location).exists(path)


def remove_dir(store: Store, location: Location, path: str) -> bool:
    """Remove an empty directory; report whether it succeeded."""
    try:
        store.fs(location).remove_dir(path)
    except FilesystemError:
        return False
    return True


def remove_dir_all_where(
    store: Store,
    location: Location,
    path: str,
    predicate: Callable[[DirEntry], bool],
) -> int:
    """Remove files below ``path`` matching ``predicate``; return the count."""
    try:
        return store.fs(location).remove_dir_all_where(path, predicate)
    except FilesystemError as error:
        raise TrussedError(ErrorKind.FILESYSTEM_WRITE_FAILURE) from error