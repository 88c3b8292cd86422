"""Shared fixtures: an in-memory provider with fault injection."""

import pytest

from remotefs.utils.errors import BackendError
from remotefs.utils.errors import DirectoryNotEmptyError
from remotefs.utils.errors import ExistsError
from remotefs.utils.errors import InvalidOperationError
from remotefs.utils.errors import NotExistError
from remotefs.utils.fs import EntryKind
from remotefs.utils.fs import FileInfo
from remotefs.utils.fs import FilesystemProvider


def _norm(path: str) -> str:
    return path.rstrip("/") if path not in ("", "/") else path


def _parent(path: str) -> str:
    return path.rpartition("/")[0]


class MemoryFilesystem(FilesystemProvider):
    """Dict-backed provider recording every primitive call.

    ``broken`` paths always fail removal; ``flaky`` maps a path to the number
    of removal attempts that fail before one succeeds; ``on_list`` runs after
    a listing snapshot is taken, to simulate other actors.
    """

    def __init__(self):
        self.dirs: set[str] = set()
        self.files: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.broken: set[str] = set()
        self.flaky: dict[str, int] = {}
        self.on_list = None

    def add_tree(self, *paths: str) -> None:
        """Add entries; a trailing slash marks a directory."""
        for path in paths:
            parts = path.rstrip("/").split("/")
            for i in range(1, len(parts)):
                self.dirs.add("/".join(parts[:i]))
            if path.endswith("/"):
                self.dirs.add(path.rstrip("/"))
            else:
                self.files[path] = b""

    def entries(self) -> set[str]:
        return self.dirs | set(self.files)

    def primitive_calls(self, *names: str) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] in names]

    def _parent_exists(self, path: str) -> bool:
        parent = _parent(path)
        return parent in ("", "/") or parent in self.dirs

    def _check_removable(self, path: str) -> None:
        if path in self.broken:
            raise BackendError(f"{path}: permission denied by test", path=path)
        if self.flaky.get(path, 0) > 0:
            self.flaky[path] -= 1
            raise BackendError(f"{path}: temporarily locked", path=path)

    async def stat(self, path: str) -> FileInfo:
        self.calls.append(("stat", path))
        path = _norm(path)
        name = path.rpartition("/")[2]
        if path in self.dirs:
            return FileInfo(path=path, name=name, kind=EntryKind.DIRECTORY)
        if path in self.files:
            return FileInfo(path=path, name=name, kind=EntryKind.FILE, size=len(self.files[path]))
        raise NotExistError(f"{path}: not found", path=path)

    async def list_dir(self, path: str) -> list[FileInfo]:
        self.calls.append(("list_dir", path))
        path = _norm(path)
        if path not in self.dirs:
            raise NotExistError(f"{path}: not found", path=path)

        snapshot = []
        for child in sorted(self.entries()):
            if _parent(child) == path:
                kind = EntryKind.DIRECTORY if child in self.dirs else EntryKind.FILE
                snapshot.append(FileInfo(path=child, name=child.rpartition("/")[2], kind=kind))

        if self.on_list is not None:
            self.on_list(self, path, snapshot)
        return snapshot

    async def remove_file(self, path: str) -> None:
        self.calls.append(("remove_file", path))
        path = _norm(path)
        if path in self.dirs:
            raise InvalidOperationError(f"{path}: is a directory", path=path)
        if path not in self.files:
            raise NotExistError(f"{path}: not found", path=path)
        self._check_removable(path)
        del self.files[path]

    async def remove_dir(self, path: str) -> None:
        self.calls.append(("remove_dir", path))
        path = _norm(path)
        if path not in self.dirs:
            raise NotExistError(f"{path}: not found", path=path)
        if any(_parent(child) == path for child in self.entries()):
            raise DirectoryNotEmptyError(f"{path}: directory not empty", path=path)
        self._check_removable(path)
        self.dirs.remove(path)

    async def mkdir(self, path: str) -> None:
        self.calls.append(("mkdir", path))
        path = _norm(path)
        if path in self.entries():
            raise ExistsError(f"{path}: exists", path=path)
        if not self._parent_exists(path):
            raise NotExistError(f"{path}: parent missing", path=path)
        self.dirs.add(path)

    async def rename(self, src: str, dst: str) -> None:
        self.calls.append(("rename", src))
        self.files[_norm(dst)] = self.files.pop(_norm(src))

    async def read_bytes(self, path: str, start: int = 0, length: int = -1) -> bytes:
        self.calls.append(("read_bytes", path))
        data = self.files[_norm(path)][start:]
        return data[:length] if length > 0 else data

    async def write_bytes(self, path: str, data: bytes = b"") -> None:
        self.calls.append(("write_bytes", path))
        self.files[_norm(path)] = data


@pytest.fixture
def memory_fs():
    """Empty in-memory filesystem."""
    return MemoryFilesystem()
