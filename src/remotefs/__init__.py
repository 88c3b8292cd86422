"""remotefs - One filesystem interface over SFTP, FTP and the local disk."""

__version__ = "0.1.0"
__license__ = "GPL-3.0-or-later"

from remotefs.core.mkdir import make_dir_all
from remotefs.core.remove import remove_all
from remotefs.utils.fs import FilesystemProvider
from remotefs.utils.fs import FTPFilesystem
from remotefs.utils.fs import LocalFilesystem
from remotefs.utils.fs import SFTPFilesystem
from remotefs.utils.fs import create_filesystem


__all__ = [
    "remove_all",
    "make_dir_all",
    "FilesystemProvider",
    "LocalFilesystem",
    "FTPFilesystem",
    "SFTPFilesystem",
    "create_filesystem",
    "__version__",
]
