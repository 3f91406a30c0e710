"""Per-client file storage, namespaced below ``<client_id>/dat/``."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator

from trustore import store as _store
from trustore.fs import DirEntry, Filesystem, FilesystemError
from trustore.store import Store
from trustore.types import ErrorKind, Location, TrussedError

USER_ATTRIBUTE_NUMBER = 37
"""Filesystem attribute number under which user attributes are kept."""

_DATA_DIR = "dat"


@dataclass(frozen=True)
class ReadDirState:
    """Where a directory listing stopped, so it can be resumed."""

    real_dir: str
    last: int


@dataclass(frozen=True)
class ReadDirFilesState:
    """Where a listing of file contents stopped, so it can be resumed."""

    real_dir: str
    last: int
    location: Location
    user_attribute: bytes | None


def _join(base: str, name: str) -> str:
    return f"{base.rstrip('/')}/{name}"


class ClientFilestore:
    """Files of one client; clients cannot see outside their namespace."""

    def __init__(self, client_id: str, store: Store) -> None:
        self.client_id = client_id
        self.store = store

    def actual_path(self, client_path: str) -> str:
        """Map a client's path to the path within the store."""
        parts = [self.client_id.strip("/"), _DATA_DIR]
        relative = client_path.strip("/")
        if relative:
            parts.append(relative)
        return "/".join(parts)

    def client_path(self, actual_path: str) -> str:
        """Map a path within the store back to the client's view of it."""
        relative = actual_path.lstrip("/")
        end_of_namespace = relative.find("/")
        if end_of_namespace < 0:
            raise ValueError(f"path {actual_path!r} has no client namespace")
        return relative[end_of_namespace + len(f"/{_DATA_DIR}/"):]

    def _internal_fs(self) -> Filesystem:
        return self.store.fs(Location.INTERNAL)

    @staticmethod
    def _require_internal(location: Location) -> None:
        if location is not Location.INTERNAL:
            raise TrussedError(ErrorKind.REQUEST_NOT_AVAILABLE)

    def read(self, path: str, location: Location) -> bytes:
        """Return the contents of a client file."""
        return _store.read(self.store, location, self.actual_path(path))

    def write(self, path: str, location: Location, data: bytes) -> None:
        """Write a client file, creating its directories as needed."""
        _store.store_data(self.store, location, self.actual_path(path), data)

    def exists(self, path: str, location: Location) -> bool:
        """Whether a client file or directory exists."""
        return _store.exists(self.store, location, self.actual_path(path))

    def remove_file(self, path: str, location: Location) -> None:
        """Remove a client file."""
        if not _store.delete(self.store, location, self.actual_path(path)):
            raise TrussedError(ErrorKind.INTERNAL_ERROR)

    def remove_dir(self, path: str, location: Location) -> None:
        """Remove an empty client directory."""
        if not _store.delete(self.store, location, self.actual_path(path)):
            raise TrussedError(ErrorKind.INTERNAL_ERROR)

    def remove_dir_all(self, path: str, location: Location) -> int:
        """Remove a client directory with everything below it; return the file count."""
        try:
            return _store.remove_dir_all_where(
                self.store, location, self.actual_path(path), lambda _entry: True
            )
        except TrussedError as error:
            raise TrussedError(ErrorKind.INTERNAL_ERROR) from error

    def _entries(self, fs: Filesystem, real_dir: str) -> list[DirEntry] | None:
        try:
            return list(fs.read_dir(real_dir))
        except FilesystemError:
            return None

    def _to_client(self, entry: DirEntry) -> DirEntry:
        return replace(entry, path=self.client_path(entry.path))

    def read_dir_first(
        self, dir: str, location: Location, not_before: str | None
    ) -> tuple[DirEntry, ReadDirState] | None:
        """Return the first entry of a directory (skipping ``.`` and ``..``).

        With ``not_before`` set, the first entry returned is the one with
        that name, or nothing if there is none.
        """
        self._require_internal(location)
        real_dir = self.actual_path(dir)
        entries = self._entries(self._internal_fs(), real_dir)
        if entries is None:
            return None
        for index, entry in enumerate(entries):
            if index < 2:
                continue
            if not_before is None or entry.file_name == not_before:
                return self._to_client(entry), ReadDirState(real_dir, index)
        return None

    def read_dir_next(self, state: ReadDirState) -> tuple[DirEntry, ReadDirState] | None:
        """Return the entry following the one ``state`` points at."""
        entries = self._entries(self._internal_fs(), state.real_dir)
        index = state.last + 1
        if entries is None or index >= len(entries):
            return None
        return self._to_client(entries[index]), ReadDirState(state.real_dir, index)

    def _matching_files(
        self,
        fs: Filesystem,
        real_dir: str,
        start: int,
        user_attribute: bytes | None,
    ) -> Iterator[tuple[int, DirEntry]]:
        entries = self._entries(fs, real_dir)
        if entries is None:
            return
        for index, entry in enumerate(entries):
            if index < start or not entry.file_type.is_file:
                continue
            if user_attribute is not None:
                attribute = fs.attribute(
                    _join(real_dir, entry.file_name), USER_ATTRIBUTE_NUMBER
                )
                if attribute != user_attribute:
                    continue
            yield index, entry

    def _files_step(
        self,
        real_dir: str,
        start: int,
        location: Location,
        user_attribute: bytes | None,
    ) -> tuple[bytes | None, ReadDirFilesState] | None:
        fs = self._internal_fs()
        for index, entry in self._matching_files(fs, real_dir, start, user_attribute):
            try:
                data: bytes | None = _store.read(self.store, location, entry.path)
            except TrussedError:
                data = None
            return data, ReadDirFilesState(real_dir, index, location, user_attribute)
        return None

    def read_dir_files_first(
        self,
        clients_dir: str,
        location: Location,
        user_attribute: bytes | None,
    ) -> tuple[bytes | None, ReadDirFilesState] | None:
        """Return the contents of the first file in a directory.

        Directories are skipped; with ``user_attribute`` set, only files
        carrying exactly that attribute are considered.
        """
        self._require_internal(location)
        return self._files_step(self.actual_path(clients_dir), 0, location, user_attribute)

    def read_dir_files_next(
        self, state: ReadDirFilesState
    ) -> tuple[bytes | None, ReadDirFilesState] | None:
        """Continue :meth:`read_dir_files_first` after the file ``state`` points at."""
        return self._files_step(
            state.real_dir, state.last + 1, state.location, state.user_attribute
        )

    def _locate(self, fs: Filesystem, real_dir: str, filename: str) -> str | None:
        entries = self._entries(fs, real_dir)
        if entries is None:
            return None
        for entry in entries[2:]:
            if entry.file_type.is_file:
                if entry.file_name == filename:
                    return entry.path
            else:
                found = self._locate(fs, entry.path, filename)
                if found is not None:
                    return found
        return None

    def locate_file(
        self, location: Location, underneath: str | None, filename: str
    ) -> str | None:
        """Search a directory tree depth-first for a file with the given name."""
        self._require_internal(location)
        real_dir = self.actual_path(underneath if underneath is not None else "/")
        found = self._locate(self._internal_fs(), real_dir, filename)
        return self.client_path(found) if found is not None else None