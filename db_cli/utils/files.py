"""Owner-only file IO shared by the profile store and the transfer protocol.

Writes go to a sibling temporary file created with mode 0600 and are then
renamed over the target. On POSIX the rename is atomic when both paths are on
the same filesystem, so readers see either the old file or the new one.
"""

import asyncio
import os
from pathlib import Path

import aiofiles

PRIVATE_FILE_MODE = 0o600


def _private_opener(path: str, flags: int) -> int:
    return os.open(path, flags, PRIVATE_FILE_MODE)


async def _write_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.tmp")

    try:
        async with aiofiles.open(tmp_path, "w", encoding="utf-8", opener=_private_opener) as f:
            await f.write(content)

        # A leftover temp file keeps its old mode, so tighten it explicitly
        os.chmod(tmp_path, PRIVATE_FILE_MODE)
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


async def write_private_file(path: str | Path, content: str) -> None:
    """Replace a file wholesale with content readable only by its owner.

    The write is shielded from cancellation: once started it runs to
    completion or failure, so an aborted prompt never leaves a partial file.

    Args:
        path: Target file
        content: Full new file content

    Raises:
        OSError: If the file cannot be written or renamed
    """
    await asyncio.shield(_write_atomic(Path(path), content))


async def read_text(path: str | Path) -> str:
    """Read a UTF-8 text file.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not UTF-8
    """
    async with aiofiles.open(Path(path), encoding="utf-8") as f:
        return await f.read()
