import pytest

from config import ScoremapLoadConfig
from score_errors import (
    PropertyDefinitionError,
    ScoremapLoadError,
    ScoremapParseError,
    StatementDefinitionError,
)
from scoremap import SUPPORTED_PROPERTIES, load_scoremap, parse_scoremap
from scoremap_models import MusicInfo, Section


def test_one_sentence_score_parses_to_single_section(one_sentence_scoremap):
    notes = one_sentence_scoremap.notes()
    assert len(notes) == 1
    note = notes[0]
    assert note.is_sentence()
    assert (note.duration.start_seconds, note.duration.end_seconds) == (0.0, 3.0)

    sections = one_sentence_scoremap.sections()
    assert sections == [Section(from_id=note.id, to_id=note.id)]
    assert one_sentence_scoremap.section_window(sections[0]) == (0.0, 3.0)


def test_parsed_sentence_shows_one_of_its_styles(one_sentence_scoremap):
    sentence = one_sentence_scoremap.notes()[0].content.sentence
    unit = sentence.units[0]
    assert unit.displayed_style() in unit.styles()
    assert unit.displayed_style() == "cha"


def test_notes_have_positive_durations_and_ordered_windows(two_sentence_scoremap):
    for note in two_sentence_scoremap.notes():
        assert note.duration.end > note.duration.start

    windows = [two_sentence_scoremap.section_window(section) for section in two_sentence_scoremap.sections()]
    assert windows == [(0.0, 1.0), (1.0, 2.0), (2.0, 5.0), (5.0, 8.0)]
    for (_, previous_end), (next_start, _) in zip(windows, windows[1:]):
        assert previous_end <= next_start


def test_music_info(two_sentence_scoremap):
    assert two_sentence_scoremap.music_info() == MusicInfo(
        title="Two Lines",
        song_author="Someone",
        score_author="Somebody",
        bgm="song.ogg",
    )


def test_music_info_defaults():
    info = parse_scoremap("[start]\n*1\n[end]").music_info()
    assert info.title == "Untitled"
    assert info.bgm is None


def test_note_by_id_rejects_foreign_ids(one_sentence_scoremap, two_sentence_scoremap):
    foreign_id = two_sentence_scoremap.notes()[0].id
    with pytest.raises(KeyError):
        one_sentence_scoremap.note_by_id(foreign_id)


def test_separate_parses_never_share_note_ids(one_sentence_text):
    first = parse_scoremap(one_sentence_text)
    second = parse_scoremap(one_sentence_text)
    assert first.notes()[0].id != second.notes()[0].id
    assert first.notes()[0].id.index == second.notes()[0].id.index


def test_empty_score_has_no_sections():
    scoremap = parse_scoremap("title = Nothing\n")
    assert scoremap.notes() == []
    assert scoremap.sections() == []


def test_unsupported_property_fails_by_default():
    with pytest.raises(PropertyDefinitionError) as excinfo:
        parse_scoremap("title = A\ngenre = pop\n")
    assert excinfo.value.line_number == 2


def test_unsupported_property_dropped_when_configured(debug_logs):
    scoremap = parse_scoremap("genre = pop\ntitle = A\n", ScoremapLoadConfig(ignore_unsupported_property=True))
    assert scoremap.metadata() == {"title": "A"}
    assert "dropping unsupported property 'genre'" in debug_logs.text


@pytest.mark.parametrize("line", ["title =", "bgm = cover.png"])
def test_invalid_property_fails_by_default(line):
    with pytest.raises(PropertyDefinitionError):
        parse_scoremap(line)


def test_invalid_property_dropped_when_configured():
    config = ScoremapLoadConfig(ignore_invalid_properties=True)
    scoremap = parse_scoremap("bgm = cover.png\ntitle = A\n", config)
    assert scoremap.metadata() == {"title": "A"}
    with pytest.raises(PropertyDefinitionError):
        parse_scoremap("genre = pop", config)


def test_supported_property_set():
    assert SUPPORTED_PROPERTIES == {"title", "song_author", "score_author", "bgm"}


def test_first_error_aborts_parse():
    text = "[start]\n*1\n歌\n:うた\n>> ok\n[end]\n>> outside"
    with pytest.raises(StatementDefinitionError) as excinfo:
        parse_scoremap(text)
    assert excinfo.value.line_number == 7
    assert isinstance(excinfo.value, ScoremapParseError)


def test_load_scoremap_reads_utf8(tmp_path, one_sentence_text):
    score_path = tmp_path / "tea.txt"
    score_path.write_text(one_sentence_text, encoding="utf-8")
    scoremap = load_scoremap(score_path)
    assert scoremap.music_info().title == "Tea Song"


def test_load_scoremap_wraps_read_errors(tmp_path):
    with pytest.raises(ScoremapLoadError):
        load_scoremap(tmp_path / "missing.txt")

    broken_path = tmp_path / "broken.txt"
    broken_path.write_bytes(b"title = \xff\xfe\n")
    with pytest.raises(ScoremapLoadError):
        load_scoremap(broken_path)


def test_caption_and_sentence_sharing_a_start_give_zero_length_window():
    scoremap = parse_scoremap("[start]\n*1\n>> cap\n歌\n:うた\n*3\n[end]")
    windows = [scoremap.section_window(section) for section in scoremap.sections()]
    assert windows == [(0.0, 1.0), (1.0, 1.0), (1.0, 3.0)]
