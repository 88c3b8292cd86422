"""Filesystem provider abstraction for local, FTP and SFTP operations."""

from .config import FTPConfig
from .config import SFTPConfig
from .factory import create_filesystem
from .ftp import FTPFilesystem
from .local import LocalFilesystem
from .provider import EntryKind
from .provider import FileInfo
from .provider import FilesystemProvider
from .sftp import SFTPFilesystem


__all__ = [
    "EntryKind",
    "FileInfo",
    "FilesystemProvider",
    "LocalFilesystem",
    "FTPFilesystem",
    "SFTPFilesystem",
    "FTPConfig",
    "SFTPConfig",
    "create_filesystem",
]
