import asyncio

import pytest

from errors import StorageError
from services.storage import read_prompt, save_bytes, save_prompt


def test_read_prompt_strips_and_handles_missing(tmp_path):
    path = tmp_path / "cat.txt"
    assert read_prompt(path) is None

    path.write_text("  Mood: calm\nTempo: slow \n", encoding="utf-8")
    assert read_prompt(path) == "Mood: calm\nTempo: slow"


def test_read_prompt_treats_blank_and_undecodable_as_missing(tmp_path):
    blank = tmp_path / "blank.txt"
    blank.write_text("   \n", encoding="utf-8")
    assert read_prompt(blank) is None

    broken = tmp_path / "broken.txt"
    broken.write_bytes(b"\xff\xfe\xfa")
    assert read_prompt(broken) is None


def test_save_prompt_reports_failure_without_raising(tmp_path):
    assert asyncio.run(save_prompt(tmp_path / "ok.txt", "calm piano")) is True
    assert (tmp_path / "ok.txt").read_text(encoding="utf-8") == "calm piano"

    assert asyncio.run(save_prompt(tmp_path / "missing" / "x.txt", "calm piano")) is False


def test_save_bytes_wraps_os_errors(tmp_path):
    asyncio.run(save_bytes(tmp_path / "a.wav", b"RIFF"))
    assert (tmp_path / "a.wav").read_bytes() == b"RIFF"

    with pytest.raises(StorageError):
        asyncio.run(save_bytes(tmp_path / "missing" / "a.wav", b"RIFF"))
