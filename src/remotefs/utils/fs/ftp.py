"""FTP provider built on the standard ftplib client."""

import asyncio
import io
import logging
from ftplib import FTP
from ftplib import all_errors
from ftplib import error_perm
from pathlib import PurePosixPath

from remotefs.utils.errors import BackendError
from remotefs.utils.errors import ConnectionFailedError
from remotefs.utils.errors import DirectoryNotEmptyError
from remotefs.utils.errors import InvalidOperationError
from remotefs.utils.errors import NotDirectoryError
from remotefs.utils.errors import NotExistError
from remotefs.utils.errors import UnsupportedServerError

from .config import FTPConfig
from .provider import EntryKind
from .provider import FileInfo
from .provider import FilesystemProvider


logger = logging.getLogger(__name__)


def _reply_code(exc: Exception) -> str:
    return str(exc)[:3]


def _parse_facts(text: str) -> dict[str, str]:
    """Parse an MLST/MLSD fact string such as 'type=dir;size=0;'."""
    facts = {}
    for fact in text.split(";"):
        if "=" in fact:
            key, value = fact.split("=", 1)
            facts[key.strip().lower()] = value.strip()
    return facts


def _kind_from_facts(facts: dict[str, str]) -> EntryKind:
    if facts.get("type", "").lower() in ("dir", "cdir", "pdir"):
        return EntryKind.DIRECTORY
    return EntryKind.FILE


class FTPFilesystem(FilesystemProvider):
    """FTP filesystem provider.

    Uses standard ftplib for maximum compatibility with older servers. All
    blocking calls run in a worker thread; one provider owns one control
    connection and is not meant to be shared between concurrent tasks.
    """

    def __init__(self, config: FTPConfig):
        self.config = config
        self._client: FTP | None = None
        self._mlst_supported: bool | None = None

    async def connect(self):
        """Connect to FTP server, reconnecting if the session went stale."""
        if self._client:
            try:
                await asyncio.to_thread(self._client.voidcmd, "NOOP")
            except all_errors:
                logger.debug("FTP session to %s went stale, reconnecting", self.config.host)
                try:
                    self._client.close()
                except all_errors:
                    pass
                self._client = None

        if self._client is None:

            def _connect():
                ftp = FTP()
                ftp.encoding = self.config.encoding
                ftp.connect(self.config.host, self.config.port, timeout=self.config.timeout)
                ftp.login(self.config.user, self.config.password)
                # Binary mode so SIZE works on every server
                ftp.voidcmd("TYPE I")
                return ftp

            try:
                self._client = await asyncio.to_thread(_connect)
            except all_errors as exc:
                raise ConnectionFailedError(
                    f"Could not connect to ftp://{self.config.host}:{self.config.port}: {exc}"
                ) from exc
            logger.debug("Connected to ftp://%s:%d", self.config.host, self.config.port)

    async def disconnect(self):
        """Disconnect from FTP server."""
        if self._client:

            def _disconnect():
                try:
                    self._client.quit()
                except all_errors:
                    self._client.close()

            await asyncio.to_thread(_disconnect)
            self._client = None

    async def _run(self, func, path: str):
        """Run a blocking ftplib call, translating its errors."""
        await self.connect()
        try:
            return await asyncio.to_thread(func)
        except all_errors as exc:
            raise BackendError(f"{path}: {exc}", path=path) from exc

    def _stat_sync(self, path: str) -> FileInfo:
        name = PurePosixPath(path).name

        if self._mlst_supported is not False:
            try:
                response = self._client.sendcmd(f"MLST {path}")
                self._mlst_supported = True
                lines = [line for line in response.splitlines() if not line[:3].isdigit()]
                facts = _parse_facts(lines[0].strip().split(" ", 1)[0]) if lines else {}
                kind = _kind_from_facts(facts)
                size = int(facts.get("size", 0)) if kind is EntryKind.FILE else 0
                return FileInfo(path=path, name=name, kind=kind, size=size)
            except error_perm as exc:
                code = _reply_code(exc)
                if code == "550":
                    raise NotExistError(f"{path}: {exc}", path=path) from exc
                if code not in ("500", "502"):
                    raise
                # MLST not implemented, fall back below
                self._mlst_supported = False

        try:
            size = self._client.size(path)
            return FileInfo(path=path, name=name, kind=EntryKind.FILE, size=size or 0)
        except error_perm:
            pass

        try:
            current = self._client.pwd()
            self._client.cwd(path)
            self._client.cwd(current)
            return FileInfo(path=path, name=name, kind=EntryKind.DIRECTORY)
        except error_perm as exc:
            raise NotExistError(f"{path}: {exc}", path=path) from exc

    async def stat(self, path: str) -> FileInfo:
        return await self._run(lambda: self._stat_sync(path), path)

    async def list_dir(self, path: str) -> list[FileInfo]:

        def _list_dir():
            items = []
            # Try MLSD first (modern listing)
            try:
                for name, facts in self._client.mlsd(path):
                    if name in (".", "..") or facts.get("type") in ("cdir", "pdir"):
                        continue

                    kind = _kind_from_facts(facts)
                    items.append(
                        FileInfo(
                            path=str(PurePosixPath(path) / name),
                            name=name,
                            kind=kind,
                            size=int(facts.get("size", 0)) if kind is EntryKind.FILE else 0,
                        )
                    )
                return items
            except error_perm as exc:
                code = _reply_code(exc)
                if code == "550":
                    raise NotExistError(f"{path}: {exc}", path=path) from exc
                if code not in ("500", "502"):
                    raise
                # MLSD not supported, fall back to NLST

            # NLST cannot tell a missing directory from an empty one everywhere
            if not self._stat_sync(path).is_dir:
                raise NotDirectoryError(f"{path}: not a directory", path=path)

            try:
                listings = self._client.nlst(path)
            except error_perm as exc:
                # Several servers answer 550 for an empty directory
                if _reply_code(exc) == "550":
                    return items
                raise

            for listing in listings:
                # NLST might return full paths or just names
                name = PurePosixPath(listing).name
                if name in (".", "..", ""):
                    continue

                full_path = str(PurePosixPath(path) / name)
                try:
                    items.append(self._stat_sync(full_path))
                except NotExistError:
                    # Removed since the listing was taken
                    continue

            return items

        return await self._run(_list_dir, path)

    async def remove_file(self, path: str) -> None:

        def _remove_file():
            try:
                self._client.delete(path)
            except error_perm as exc:
                info = self._lookup_sync(path)
                if not info.exists:
                    raise NotExistError(f"{path}: {exc}", path=path) from exc
                if info.is_dir:
                    raise InvalidOperationError(f"{path}: is a directory", path=path) from exc
                raise

        await self._run(_remove_file, path)

    async def remove_dir(self, path: str) -> None:

        def _remove_dir():
            try:
                self._client.rmd(path)
            except error_perm as exc:
                info = self._lookup_sync(path)
                if not info.exists:
                    raise NotExistError(f"{path}: {exc}", path=path) from exc
                if info.is_dir:
                    raise DirectoryNotEmptyError(f"{path}: {exc}", path=path) from exc
                raise InvalidOperationError(f"{path}: not a directory", path=path) from exc

        await self._run(_remove_dir, path)

    def _lookup_sync(self, path: str) -> FileInfo:
        try:
            return self._stat_sync(path)
        except NotExistError:
            return FileInfo.absent(path)

    async def mkdir(self, path: str) -> None:
        await self._run(lambda: self._client.mkd(path), path)

    async def rename(self, src: str, dst: str) -> None:
        await self._run(lambda: self._client.rename(src, dst), src)

    async def read_bytes(self, path: str, start: int = 0, length: int = -1) -> bytes:

        def _read():
            buffer = io.BytesIO()
            try:
                self._client.retrbinary(f"RETR {path}", buffer.write, rest=start or None)
            except error_perm as exc:
                if _reply_code(exc) == "550":
                    raise NotExistError(f"{path}: {exc}", path=path) from exc
                raise
            data = buffer.getvalue()

            if length > 0:
                return data[:length]
            return data

        return await self._run(_read, path)

    async def write_bytes(self, path: str, data: bytes = b"") -> None:
        await self._run(lambda: self._client.storbinary(f"STOR {path}", io.BytesIO(data)), path)
        logger.debug("Stored %d bytes at %s", len(data), path)

    async def ping(self, path: str = "/") -> None:
        """Check the server supports resumable transfers (FEAT lists REST)."""

        def _feat():
            return self._client.sendcmd("FEAT")

        try:
            response = await self._run(_feat, path)
        except BackendError as exc:
            raise UnsupportedServerError(f"FEAT failed: {exc}", path=path) from exc

        if not response.startswith("211") or "REST" not in response.upper():
            raise UnsupportedServerError(f"{response[:3]}: unsupported server", path=path)
