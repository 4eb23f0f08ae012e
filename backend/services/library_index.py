import os
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from models import AUDIO_EXTENSIONS, IMAGE_EXTENSIONS, MatchedRecord
from services.naming import resolve_audio_name, resolve_image_name
from services.storage import read_prompt
from settings import Settings

logger = logging.getLogger(__name__)

NameFn = Callable[[str], str]
MtimeFn = Callable[[str], float]


def list_files(directory: Path, extensions: Iterable[str]) -> List[str]:
    """Names of regular files in ``directory`` whose lower-cased suffix is accepted."""
    if not directory.is_dir():
        return []
    accepted = {ext.lower() for ext in extensions}
    return [
        name
        for name in os.listdir(directory)
        if Path(name).suffix.lower() in accepted and (directory / name).is_file()
    ]


def file_mtime(directory: Path) -> MtimeFn:
    def _mtime(name: str) -> float:
        try:
            return (directory / name).stat().st_mtime
        except OSError:
            return 0.0

    return _mtime


def build_file_map(files: Iterable[str], name_fn: NameFn, mtime_of: MtimeFn) -> Dict[str, str]:
    """Map each logical name to its most recently modified file.

    Files are visited in listing order. A later file only replaces an earlier
    one with the same logical name when it is strictly newer, so ties keep the
    first file seen.
    """
    file_map: Dict[str, str] = {}
    for name in files:
        key = name_fn(name)
        existing = file_map.get(key)
        if existing is None:
            file_map[key] = name
        elif mtime_of(name) > mtime_of(existing):
            file_map[key] = name
    return file_map


def pair_records(
    image_map: Dict[str, str],
    audio_map: Dict[str, str],
    read_prompt_for: Callable[[str], Optional[str]],
    image_mtime: MtimeFn,
) -> List[MatchedRecord]:
    records: List[MatchedRecord] = []
    for name in dict.fromkeys([*image_map, *audio_map]):
        image_file = image_map.get(name)
        audio_file = audio_map.get(name)
        if not image_file or not audio_file:
            continue
        records.append(
            MatchedRecord(
                image_url=f"/uploads/{image_file}",
                audio_url=f"/outputs/{audio_file}",
                name=name,
                prompt=read_prompt_for(name),
            )
        )

    # Newest image first; sorted() is stable so ties keep listing order.
    return sorted(records, key=lambda r: image_mtime(r.image_url.rsplit("/", 1)[-1]), reverse=True)


def match_files(settings: Settings) -> List[MatchedRecord]:
    image_mtime = file_mtime(settings.uploads_dir)
    image_map = build_file_map(
        list_files(settings.uploads_dir, IMAGE_EXTENSIONS),
        resolve_image_name,
        image_mtime,
    )
    audio_map = build_file_map(
        list_files(settings.outputs_dir, AUDIO_EXTENSIONS),
        resolve_audio_name,
        file_mtime(settings.outputs_dir),
    )

    records = pair_records(
        image_map,
        audio_map,
        lambda name: read_prompt(settings.texts_dir / f"{name}.txt"),
        image_mtime,
    )
    logger.info(f"Matched {len(records)} records from {len(image_map)} images and {len(audio_map)} audio files")
    return records
