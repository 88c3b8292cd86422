"""SFTP provider built on paramiko."""

import asyncio
import logging
import os
import socket
import stat
from pathlib import PurePosixPath

import paramiko

from remotefs.utils.errors import BackendError
from remotefs.utils.errors import ConnectionFailedError
from remotefs.utils.errors import DirectoryNotEmptyError
from remotefs.utils.errors import InvalidOperationError
from remotefs.utils.errors import NotExistError
from remotefs.utils.errors import UnsupportedServerError
from remotefs.utils.errors import translate_os_error

from .config import SFTPConfig
from .provider import EntryKind
from .provider import FileInfo
from .provider import FilesystemProvider


logger = logging.getLogger(__name__)


def _info_from_attrs(path: str, attrs: paramiko.SFTPAttributes) -> FileInfo:
    is_dir = attrs.st_mode is not None and stat.S_ISDIR(attrs.st_mode)
    return FileInfo(
        path=path,
        name=PurePosixPath(path).name,
        kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
        size=0 if is_dir else (attrs.st_size or 0),
    )


class SFTPFilesystem(FilesystemProvider):
    """SFTP filesystem provider.

    Supports "key", "password" and "keyboard" (keyboard-interactive, every
    prompt answered with the password) authentication.
    """

    def __init__(self, config: SFTPConfig):
        self.config = config
        self._ssh: paramiko.SSHClient | None = None
        self._transport: paramiko.Transport | None = None
        self._client: paramiko.SFTPClient | None = None

    def _connect_client(self) -> paramiko.SFTPClient:
        cfg = self.config

        if cfg.auth_method == "keyboard":

            def _handler(title, instructions, prompt_list):
                # Just sends the password back for all questions
                return [cfg.password for _ in prompt_list]

            sock = socket.create_connection((cfg.host, cfg.port), timeout=cfg.timeout)
            transport = paramiko.Transport(sock)
            # Owned before authenticating so a failed connect closes it
            self._transport = transport
            transport.start_client(timeout=cfg.timeout)
            transport.auth_interactive(cfg.user, _handler)
            return paramiko.SFTPClient.from_transport(transport)

        ssh = paramiko.SSHClient()
        self._ssh = ssh
        ssh.load_system_host_keys()
        if cfg.strict_host_key:
            ssh.set_missing_host_key_policy(paramiko.RejectPolicy())
        else:
            ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connect_params = {
            "hostname": cfg.host,
            "port": cfg.port,
            "username": cfg.user,
            "timeout": cfg.timeout,
            "allow_agent": False,
            "look_for_keys": False,
        }
        if cfg.auth_method == "key":
            connect_params["key_filename"] = os.path.expanduser(cfg.private_key)
        else:
            connect_params["password"] = cfg.password

        ssh.connect(**connect_params)
        return ssh.open_sftp()

    async def connect(self):
        """Open the SSH session and SFTP channel."""
        if self._client is not None:
            return

        try:
            self._client = await asyncio.to_thread(self._connect_client)
        except (paramiko.SSHException, OSError) as exc:
            self._close_sync()
            raise ConnectionFailedError(
                f"Could not connect to sftp://{self.config.host}:{self.config.port}: {exc}"
            ) from exc
        logger.debug("Connected to sftp://%s@%s:%d", self.config.user, self.config.host, self.config.port)

    def _close_sync(self):
        if self._client is not None:
            self._client.close()
        if self._ssh is not None:
            self._ssh.close()
        if self._transport is not None:
            self._transport.close()
        self._client = None
        self._ssh = None
        self._transport = None

    async def disconnect(self):
        """Close the SFTP channel and the SSH session."""
        await asyncio.to_thread(self._close_sync)

    async def _run(self, func, path: str):
        """Run a blocking paramiko call, translating its errors."""
        await self.connect()
        try:
            return await asyncio.to_thread(func)
        except OSError as exc:
            raise translate_os_error(exc, path) from exc
        except paramiko.SSHException as exc:
            raise BackendError(f"{path}: {exc}", path=path) from exc

    async def stat(self, path: str) -> FileInfo:
        # lstat: a symlink to a directory is removed, never descended into
        attrs = await self._run(lambda: self._client.lstat(path), path)
        return _info_from_attrs(path, attrs)

    async def list_dir(self, path: str) -> list[FileInfo]:
        entries = await self._run(lambda: self._client.listdir_attr(path), path)
        return [
            _info_from_attrs(str(PurePosixPath(path) / attrs.filename), attrs)
            for attrs in entries
            if attrs.filename not in (".", "..")
        ]

    async def remove_file(self, path: str) -> None:
        await self._run(lambda: self._client.remove(path), path)

    async def remove_dir(self, path: str) -> None:
        try:
            await self._run(lambda: self._client.rmdir(path), path)
        except (NotExistError, DirectoryNotEmptyError):
            raise
        except BackendError as exc:
            # Most servers answer a bare SSH_FX_FAILURE for a non-empty directory
            info = await self.lookup(path)
            if not info.exists:
                raise NotExistError(f"{path}: {exc}", path=path) from exc
            if info.is_dir:
                raise DirectoryNotEmptyError(f"{path}: {exc}", path=path) from exc
            raise InvalidOperationError(f"{path}: not a directory", path=path) from exc

    async def mkdir(self, path: str) -> None:
        await self._run(lambda: self._client.mkdir(path), path)

    async def rename(self, src: str, dst: str) -> None:
        await self._run(lambda: self._client.rename(src, dst), src)

    async def read_bytes(self, path: str, start: int = 0, length: int = -1) -> bytes:

        def _read():
            with self._client.open(path, "rb") as f:
                if start > 0:
                    f.seek(start)
                if length > 0:
                    return f.read(length)
                return f.read()

        return await self._run(_read, path)

    async def write_bytes(self, path: str, data: bytes = b"") -> None:

        def _write():
            with self._client.open(path, "wb") as f:
                f.write(data)

        await self._run(_write, path)
        logger.debug("Stored %d bytes at %s", len(data), path)

    async def ping(self, path: str = "/") -> None:
        attrs = await self._run(lambda: self._client.stat(path), path)
        if attrs is None:
            raise UnsupportedServerError("unsupported server", path=path)
