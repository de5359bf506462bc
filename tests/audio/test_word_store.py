import pytest

from hecubot.audio import WordAudioStore, format_word_list
from hecubot.audio.store import is_upper_word, word_from_filename
from hecubot.exceptions import ConfigurationError


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("heavy!.wav", "HEAVY"),
        ("heavy.wav", "heavy"),
        ("_comma.wav", "_comma"),
        ("zero!.wav", "ZERO"),
        ("kill.it.wav", "kill"),
    ],
)
def test_word_from_filename(filename, expected):
    assert word_from_filename(filename) == expected


def test_is_upper_word_ignores_non_letters():
    assert is_upper_word("HEV-2")
    assert not is_upper_word("Hev")


def test_load_reads_every_clip(store):
    assert len(store) == 9
    assert "HEAVY" in store
    assert "heavy" in store
    assert "ZERO" in store and "ONE" in store


def test_load_skips_unreadable_files(words_dir):
    (words_dir / "broken.wav").write_bytes(b"not a riff file")
    (words_dir / "notes.txt").write_text("ignored")

    store = WordAudioStore.load(words_dir)

    assert "broken" not in store
    assert store.resolve("broken") is None
    assert len(store) == 9


def test_load_missing_directory_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        WordAudioStore.load(tmp_path / "nope")


def test_resolve_upper_prefers_emphatic_clip(store):
    assert store.resolve("HEAVY").word == "HEAVY"


def test_resolve_mixed_case_prefers_lower(store):
    assert store.resolve("Heavy").word == "heavy"


def test_resolve_upper_falls_back_to_lower(store):
    assert store.resolve("WORLD").word == "world"


def test_resolve_lower_falls_back_to_upper(store):
    assert store.resolve("hev").word == "HEV"


@pytest.mark.parametrize(
    "stored, queries",
    [
        ("world", ["world", "WORLD", "WoRlD"]),
        ("HEV", ["HEV", "hev", "Hev"]),
    ],
)
def test_single_case_form_resolves_from_any_case(store, stored, queries):
    clips = [store.resolve(q) for q in queries]

    assert all(clip is not None and clip.word == stored for clip in clips)
    assert all(clip is clips[0] for clip in clips)


def test_resolve_unknown_word(store):
    assert store.resolve("missingword") is None


def test_format_word_list_rows_and_punctuation():
    words = ["b", "_period", "A", "c", "_comma", "d", "e"]

    rows = format_word_list(words).split("\n")

    assert rows == [
        ",    .    A    b    c",
        "d    e",
    ]


def test_format_word_list_empty():
    assert format_word_list([]) == ""
