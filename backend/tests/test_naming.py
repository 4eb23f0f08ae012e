from services.naming import resolve_audio_name, resolve_image_name, timestamped_name


def test_image_name_strips_trailing_timestamp():
    assert resolve_image_name("sunset-1700000000.jpg") == "sunset"
    assert resolve_image_name("sunset.jpg") == "sunset"
    assert resolve_image_name("a-b-12.png") == "a-b"
    assert resolve_image_name("a-b.png") == "a-b"


def test_image_name_edge_cases():
    assert resolve_image_name("x-0.png") == "x"
    assert resolve_image_name("photo-2-3.jpg") == "photo-2"
    assert resolve_image_name("photo-.jpg") == "photo-"
    assert resolve_image_name("photo-12a.jpg") == "photo-12a"
    assert resolve_image_name("-123.png") == "-123"
    assert resolve_image_name("2024.webp") == "2024"


def test_audio_name_keeps_full_stem():
    assert resolve_audio_name("sunset-1700000000.wav") == "sunset-1700000000"
    assert resolve_audio_name("sunset.wav") == "sunset"


def test_timestamped_name_resolves_to_same_logical_name():
    renamed = timestamped_name("beach-5.png", 1700000000123)
    assert renamed == "beach-1700000000123.png"
    assert resolve_image_name(renamed) == resolve_image_name("beach-5.png")
    assert timestamped_name("cat.jpg", 42) == "cat-42.jpg"
