import re
from pathlib import Path

_TIMESTAMP_SUFFIX = re.compile(r"[0-9]+")


def resolve_image_name(filename: str) -> str:
    """Logical name of an uploaded image: the stem minus any trailing ``-<digits>``."""
    stem = Path(filename).stem
    dash = stem.rfind("-")
    # A leading dash is part of the name, not a separator.
    if dash > 0 and _TIMESTAMP_SUFFIX.fullmatch(stem[dash + 1 :]):
        return stem[:dash]
    return stem


def resolve_audio_name(filename: str) -> str:
    # Audio is always written as <logical name>.wav, so the stem is already final.
    return Path(filename).stem


def timestamped_name(filename: str, now_ms: int) -> str:
    """Rename an image so it resolves to the same logical name but no longer collides on disk."""
    return f"{resolve_image_name(filename)}-{now_ms}{Path(filename).suffix}"
