import pytest

from trustore.filestore import (
    USER_ATTRIBUTE_NUMBER,
    ClientFilestore,
    ReadDirFilesState,
    ReadDirState,
)
from trustore.store import Store
from trustore.types import ErrorKind, Location, TrussedError

INTERNAL = Location.INTERNAL


@pytest.fixture
def store():
    return Store()


@pytest.fixture
def files(store):
    return ClientFilestore("client", store)


def test_actual_path_is_below_dat(files):
    assert files.actual_path("file.txt") == "client/dat/file.txt"


def test_client_path_inverts_actual_path(files):
    assert files.client_path(files.actual_path("sub/file.txt")) == "sub/file.txt"


def test_client_path_without_namespace_raises(files):
    with pytest.raises(ValueError):
        files.client_path("nonamespace")


def test_write_read_round_trip(files, store):
    files.write("sub/data.bin", INTERNAL, b"hello")
    assert files.read("sub/data.bin", INTERNAL) == b"hello"
    assert store.fs(INTERNAL).read("client/dat/sub/data.bin") == b"hello"


def test_clients_are_isolated(store):
    alice = ClientFilestore("alice", store)
    bob = ClientFilestore("bob", store)
    alice.write("f", Location.VOLATILE, b"x")
    assert alice.exists("f", Location.VOLATILE)
    assert not bob.exists("f", Location.VOLATILE)


def test_read_missing_raises(files):
    with pytest.raises(TrussedError) as info:
        files.read("missing", INTERNAL)
    assert info.value.kind is ErrorKind.FILESYSTEM_READ_FAILURE


def test_remove_file(files):
    files.write("f", INTERNAL, b"x")
    files.remove_file("f", INTERNAL)
    assert not files.exists("f", INTERNAL)


def test_remove_missing_file_raises_internal_error(files):
    with pytest.raises(TrussedError) as info:
        files.remove_file("missing", INTERNAL)
    assert info.value.kind is ErrorKind.INTERNAL_ERROR


def test_remove_dir(files, store):
    store.fs(INTERNAL).create_dir("client")
    store.fs(INTERNAL).create_dir("client/dat")
    store.fs(INTERNAL).create_dir("client/dat/empty")
    files.remove_dir("empty", INTERNAL)
    assert not files.exists("empty", INTERNAL)


def test_remove_dir_all_counts_files(files):
    files.write("tree/a", INTERNAL, b"1")
    files.write("tree/b", INTERNAL, b"2")
    files.write("tree/sub/c", INTERNAL, b"3")
    assert files.remove_dir_all("tree", INTERNAL) == 3
    assert not files.exists("tree", INTERNAL)


@pytest.mark.parametrize("location", [Location.VOLATILE, Location.EXTERNAL])
def test_listing_requires_internal(files, location):
    for call in (
        lambda: files.read_dir_first("d", location, None),
        lambda: files.read_dir_files_first("d", location, None),
        lambda: files.locate_file(location, None, "f"),
    ):
        with pytest.raises(TrussedError) as info:
            call()
        assert info.value.kind is ErrorKind.REQUEST_NOT_AVAILABLE


def test_read_dir_walks_all_entries(files):
    for name in ("a", "b", "c"):
        files.write(f"dir/{name}", INTERNAL, name.encode())
    result = files.read_dir_first("dir", INTERNAL, None)
    names = []
    while result is not None:
        entry, state = result
        assert isinstance(state, ReadDirState)
        assert entry.path == f"dir/{entry.file_name}"
        names.append(entry.file_name)
        result = files.read_dir_next(state)
    assert names == ["a", "b", "c"]


def test_read_dir_state_holds_real_dir(files):
    files.write("dir/a", INTERNAL, b"")
    _, state = files.read_dir_first("dir", INTERNAL, None)
    assert state.real_dir == "client/dat/dir"
    assert state.last == 2


def test_read_dir_not_before(files):
    for name in ("a", "b", "c"):
        files.write(f"dir/{name}", INTERNAL, b"")
    entry, state = files.read_dir_first("dir", INTERNAL, "b")
    assert entry.file_name == "b"
    following, _ = files.read_dir_next(state)
    assert following.file_name == "c"


def test_read_dir_not_before_missing(files):
    files.write("dir/a", INTERNAL, b"")
    assert files.read_dir_first("dir", INTERNAL, "zzz") is None


def test_read_dir_missing_directory(files):
    assert files.read_dir_first("nothing", INTERNAL, None) is None


def test_read_dir_includes_directories(files):
    files.write("dir/sub/x", INTERNAL, b"")
    entry, _ = files.read_dir_first("dir", INTERNAL, None)
    assert entry.file_name == "sub"
    assert entry.file_type.is_dir


def test_read_dir_files_skips_directories(files):
    files.write("dir/a", INTERNAL, b"first")
    files.write("dir/m/nested", INTERNAL, b"hidden")
    files.write("dir/z", INTERNAL, b"last")
    result = files.read_dir_files_first("dir", INTERNAL, None)
    contents = []
    while result is not None:
        data, state = result
        assert isinstance(state, ReadDirFilesState)
        contents.append(data)
        result = files.read_dir_files_next(state)
    assert contents == [b"first", b"last"]


def test_read_dir_files_filters_by_attribute(files, store):
    for name in ("a", "b", "c"):
        files.write(f"rk/{name}", INTERNAL, name.encode())
    fs = store.fs(INTERNAL)
    fs.set_attribute("client/dat/rk/b", USER_ATTRIBUTE_NUMBER, b"tag")
    fs.set_attribute("client/dat/rk/c", USER_ATTRIBUTE_NUMBER, b"other")
    data, state = files.read_dir_files_first("rk", INTERNAL, b"tag")
    assert data == b"b"
    assert state.user_attribute == b"tag"
    assert files.read_dir_files_next(state) is None


def test_read_dir_files_empty_directory(files, store):
    files.write("dir/sub/x", INTERNAL, b"")
    assert files.read_dir_files_first("dir", INTERNAL, None) is None


def test_locate_file_nested(files):
    files.write("a/b/target", INTERNAL, b"")
    files.write("a/other", INTERNAL, b"")
    assert files.locate_file(INTERNAL, None, "target") == "a/b/target"


def test_locate_file_underneath(files):
    files.write("x/target", INTERNAL, b"")
    files.write("y/target", INTERNAL, b"")
    assert files.locate_file(INTERNAL, "y", "target") == "y/target"


def test_locate_file_missing(files):
    files.write("a/file", INTERNAL, b"")
    assert files.locate_file(INTERNAL, None, "nope") is None