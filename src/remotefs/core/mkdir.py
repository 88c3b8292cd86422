"""mkdir -p over any FilesystemProvider."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from remotefs.utils.errors import NotDirectoryError
from remotefs.utils.errors import RemoteFSError

if TYPE_CHECKING:
    from remotefs.utils.fs.provider import FilesystemProvider


logger = logging.getLogger(__name__)


async def make_dir_all(fs: FilesystemProvider, path: str) -> None:
    """Create a directory named path, along with any necessary parents.

    Does nothing if path is already a directory. Raises NotDirectoryError if
    path exists as something else.
    """
    info = await fs.lookup(path)
    if info.is_dir:
        return
    if info.exists:
        raise NotDirectoryError(f"mkdir {path}: not a directory", path=path)

    end = len(path)
    while end > 0 and path[end - 1] == "/":
        end -= 1

    start = end
    while start > 0 and path[start - 1] != "/":
        start -= 1

    # start > 1 leaves a parent other than "" or "/"
    if start > 1:
        await make_dir_all(fs, path[: start - 1])

    try:
        await fs.mkdir(path)
        logger.debug("Created directory %s", path)
    except RemoteFSError:
        # Handles "foo/." and directories created concurrently.
        if (await fs.lookup(path)).is_dir:
            return
        raise
