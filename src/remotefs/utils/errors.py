"""Custom exceptions for remotefs."""

import errno


class RemoteFSError(Exception):
    """Base exception for remotefs errors."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class NotExistError(RemoteFSError):
    """Path does not exist (or vanished while being processed)."""
    pass


class PermissionDeniedError(RemoteFSError):
    """Backend refused the operation."""
    pass


class DirectoryNotEmptyError(PermissionDeniedError):
    """Directory still has children."""
    pass


class ExistsError(RemoteFSError):
    """Path already exists."""
    pass


class InvalidOperationError(RemoteFSError):
    """Operation does not apply to this kind of entry."""
    pass


class NotDirectoryError(RemoteFSError):
    """Path exists but is not a directory."""
    pass


class BackendError(RemoteFSError):
    """Opaque transport or protocol failure."""
    pass


class ConfigError(RemoteFSError):
    """Connection configuration is invalid."""
    pass


class ConnectionFailedError(RemoteFSError):
    """Could not establish a session with the server."""
    pass


class UnsupportedServerError(RemoteFSError):
    """Server lacks a capability remotefs relies on."""
    pass


_ERRNO_MAP: dict[int, type[RemoteFSError]] = {
    errno.ENOENT: NotExistError,
    errno.ENOTEMPTY: DirectoryNotEmptyError,
    errno.EEXIST: ExistsError,
    errno.EACCES: PermissionDeniedError,
    errno.EPERM: PermissionDeniedError,
    errno.ENOTDIR: NotDirectoryError,
    errno.EISDIR: InvalidOperationError,
}


def translate_os_error(exc: OSError, path: str) -> RemoteFSError:
    """Map an ``OSError`` (local disk or paramiko SFTP) onto the remotefs hierarchy.

    The caller is expected to ``raise translate_os_error(exc, path) from exc``.
    """
    error_class = _ERRNO_MAP.get(exc.errno, BackendError)
    message = exc.strerror or str(exc) or exc.__class__.__name__
    return error_class(f"{path}: {message}", path=path)
