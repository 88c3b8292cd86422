"""Best-effort recursive removal over any FilesystemProvider."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from remotefs.utils.errors import DirectoryNotEmptyError
from remotefs.utils.errors import NotExistError
from remotefs.utils.errors import RemoteFSError

if TYPE_CHECKING:
    from remotefs.utils.fs.provider import FilesystemProvider


logger = logging.getLogger(__name__)

# Consecutive passes in which every child failed before draining gives up.
DEFAULT_MAX_ATTEMPTS = 3


async def remove_all(fs: FilesystemProvider, path: str, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
    """Remove path and any children it contains.

    Removes everything it can but raises the first error it encounters.
    A path that does not exist, or that disappears while being walked, is
    not an error. An empty path is a silent no-op.

    Args:
        fs: Backend providing the single-entry primitives
        path: Slash-separated path within the backend
        max_attempts: How many consecutive listing passes may fail on every
            child before the directory is given up on

    Raises:
        RemoteFSError: First failure that was not a missing path
    """
    if not path:
        return

    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    # Simple case: path is a file or an empty directory.
    try:
        await fs.remove(path)
        return
    except NotExistError:
        return
    except DirectoryNotEmptyError:
        logger.debug("Draining non-empty directory %s", path)

    first_error: RemoteFSError | None = None
    stalled = 0

    while stalled < max_attempts:
        try:
            entries = await fs.list_dir(path)
        except NotExistError:
            return

        if not entries:
            break

        failed = 0
        for entry in entries:
            try:
                await remove_all(fs, f"{path.rstrip('/')}/{entry.name}", max_attempts)
            except RemoteFSError as exc:
                failed += 1
                if first_error is None:
                    first_error = exc

        if failed == len(entries):
            stalled += 1
            logger.debug("No progress removing children of %s (pass %d/%d)", path, stalled, max_attempts)
        else:
            stalled = 0

    try:
        await fs.remove(path)
        return
    except NotExistError:
        return
    except RemoteFSError:
        if first_error is not None:
            raise first_error
        raise
