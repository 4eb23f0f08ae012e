import logging
from pathlib import Path
from typing import Optional

import aiofiles

from errors import StorageError

logger = logging.getLogger(__name__)


async def save_bytes(path: Path, data: bytes) -> None:
    try:
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
    except OSError as e:
        raise StorageError(f"Failed to write {path.name}: {e}") from e


async def save_prompt(path: Path, text: str) -> bool:
    """Persist a prompt next to its audio. Failures are logged, not raised."""
    try:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(text)
        return True
    except OSError as e:
        logger.error(f"Error saving text file {path}: {e}")
        return False


def read_prompt(path: Path) -> Optional[str]:
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading text file {path}: {e}")
        return None
    return text or None
