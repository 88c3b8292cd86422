"""Local disk provider."""

import errno
import logging
import os
import stat
from pathlib import Path

import aiofiles

from remotefs.utils.errors import DirectoryNotEmptyError
from remotefs.utils.errors import NotExistError
from remotefs.utils.errors import translate_os_error

from .provider import EntryKind
from .provider import FileInfo
from .provider import FilesystemProvider


logger = logging.getLogger(__name__)


def _info_from_path(path: Path, st: os.stat_result) -> FileInfo:
    kind = EntryKind.DIRECTORY if stat.S_ISDIR(st.st_mode) else EntryKind.FILE
    return FileInfo(
        path=str(path),
        name=path.name,
        kind=kind,
        size=st.st_size if kind is EntryKind.FILE else 0,
    )


class LocalFilesystem(FilesystemProvider):
    """Local filesystem provider.

    Symlinks are reported as files and never followed, so removing a tree
    never reaches outside it.
    """

    async def stat(self, path: str) -> FileInfo:
        p = Path(path)
        try:
            st = p.lstat()
        except OSError as exc:
            # "file/child" is just as absent as a missing name
            if exc.errno in (errno.ENOENT, errno.ENOTDIR):
                raise NotExistError(f"{path}: no such file or directory", path=path) from exc
            raise translate_os_error(exc, path) from exc
        return _info_from_path(p, st)

    async def list_dir(self, path: str) -> list[FileInfo]:
        p = Path(path)
        try:
            children = list(p.iterdir())
        except OSError as exc:
            if exc.errno == errno.ENOENT:
                raise NotExistError(f"{path}: no such file or directory", path=path) from exc
            raise translate_os_error(exc, path) from exc

        items = []
        for item in children:
            try:
                st = item.lstat()
            except OSError as exc:
                # Removed between iterdir() and stat()
                if exc.errno == errno.ENOENT:
                    continue
                raise translate_os_error(exc, str(item)) from exc
            items.append(_info_from_path(item, st))
        return items

    async def remove_file(self, path: str) -> None:
        try:
            os.remove(path)
        except OSError as exc:
            raise translate_os_error(exc, path) from exc

    async def remove_dir(self, path: str) -> None:
        try:
            os.rmdir(path)
        except OSError as exc:
            if exc.errno in (errno.ENOTEMPTY, errno.EEXIST):
                raise DirectoryNotEmptyError(f"{path}: directory not empty", path=path) from exc
            raise translate_os_error(exc, path) from exc

    async def mkdir(self, path: str) -> None:
        try:
            Path(path).mkdir()
        except OSError as exc:
            raise translate_os_error(exc, path) from exc

    async def rename(self, src: str, dst: str) -> None:
        try:
            Path(src).rename(dst)
        except OSError as exc:
            raise translate_os_error(exc, src) from exc

    async def read_bytes(self, path: str, start: int = 0, length: int = -1) -> bytes:
        try:
            async with aiofiles.open(path, "rb") as f:
                if start > 0:
                    await f.seek(start)
                if length > 0:
                    return await f.read(length)
                return await f.read()
        except OSError as exc:
            raise translate_os_error(exc, path) from exc

    async def write_bytes(self, path: str, data: bytes = b"") -> None:
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as exc:
            raise translate_os_error(exc, path) from exc
        logger.debug("Wrote %d bytes to %s", len(data), path)
