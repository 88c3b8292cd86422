"""Filesystem abstraction shared by the local, FTP and SFTP backends."""

import logging
from abc import ABC
from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

from remotefs.core.mkdir import make_dir_all
from remotefs.core.remove import DEFAULT_MAX_ATTEMPTS
from remotefs.core.remove import remove_all
from remotefs.utils.errors import DirectoryNotEmptyError
from remotefs.utils.errors import InvalidOperationError
from remotefs.utils.errors import NotExistError
from remotefs.utils.errors import RemoteFSError


logger = logging.getLogger(__name__)


class EntryKind(Enum):
    """What a path resolved to at the moment it was looked up."""

    FILE = "file"
    DIRECTORY = "dir"
    ABSENT = "absent"


@dataclass
class FileInfo:
    """File information that works for every backend."""

    path: str
    name: str
    kind: EntryKind
    size: int = 0

    @classmethod
    def absent(cls, path: str) -> "FileInfo":
        return cls(path=path, name=PurePosixPath(path).name, kind=EntryKind.ABSENT)

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def exists(self) -> bool:
        return self.kind is not EntryKind.ABSENT


class FilesystemProvider(ABC):
    """Abstract filesystem provider.

    Backends implement the single-entry primitives below. Recursive removal
    and ``mkdir -p`` are built on top of them once, in ``remotefs.core``.
    """

    @abstractmethod
    async def stat(self, path: str) -> FileInfo:
        """Stat path, raising NotExistError when it is absent."""
        pass

    @abstractmethod
    async def list_dir(self, path: str) -> list[FileInfo]:
        """List directory contents, excluding '.' and '..'."""
        pass

    @abstractmethod
    async def remove_file(self, path: str) -> None:
        """Remove a single file."""
        pass

    @abstractmethod
    async def remove_dir(self, path: str) -> None:
        """Remove an empty directory.

        Raises DirectoryNotEmptyError if it still has children and
        NotExistError if it is already gone.
        """
        pass

    @abstractmethod
    async def mkdir(self, path: str) -> None:
        """Create exactly one directory level."""
        pass

    @abstractmethod
    async def rename(self, src: str, dst: str) -> None:
        """Rename/move file or directory."""
        pass

    @abstractmethod
    async def read_bytes(self, path: str, start: int = 0, length: int = -1) -> bytes:
        """Read file bytes (optionally from start position)."""
        pass

    @abstractmethod
    async def write_bytes(self, path: str, data: bytes = b"") -> None:
        """Write bytes to file, creating or truncating it."""
        pass

    async def connect(self) -> None:
        """Open the backend session if it needs one."""

    async def disconnect(self) -> None:
        """Close the backend session."""

    async def ping(self, path: str = "/") -> None:
        """Check the backend is reachable and usable."""
        await self.stat(path)

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    async def lookup(self, path: str) -> FileInfo:
        """Stat path, returning an ABSENT entry instead of raising."""
        try:
            return await self.stat(path)
        except NotExistError:
            return FileInfo.absent(path)

    async def exists(self, path: str) -> bool:
        return (await self.lookup(path)).exists

    async def is_dir(self, path: str) -> bool:
        return (await self.lookup(path)).is_dir

    async def remove(self, path: str) -> None:
        """Remove a file or an empty directory.

        Raises NotExistError if path is absent, DirectoryNotEmptyError if a
        directory could not be removed and InvalidOperationError if a file
        could not be removed.
        """
        info = await self.stat(path)

        if info.is_dir:
            try:
                await self.remove_dir(path)
            except NotExistError:
                raise
            except RemoteFSError as exc:
                raise DirectoryNotEmptyError(f"{path}: {exc}: directory not empty", path=path) from exc
            logger.debug("Removed directory %s", path)
            return

        try:
            await self.remove_file(path)
        except NotExistError:
            raise
        except RemoteFSError as exc:
            raise InvalidOperationError(f"{path}: {exc}", path=path) from exc
        logger.debug("Removed file %s", path)

    async def remove_all(self, path: str, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        """Remove path and everything beneath it."""
        await remove_all(self, path, max_attempts=max_attempts)

    async def make_dir_all(self, path: str) -> None:
        """Create path along with any missing parents."""
        await make_dir_all(self, path)

    def join_path(self, *parts: str) -> str:
        return str(PurePosixPath(*parts))
