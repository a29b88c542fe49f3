from collections import deque

import pytest

from score_errors import (
    CommandError,
    PropertyDefinitionError,
    ScoremapParseError,
    StatementDefinitionError,
    TimingDefinitionError,
)
from score_lexer import Token, TokenKind, lex
from score_parser import (
    Claimed,
    ParserCtx,
    calc_duration,
    caption_handler,
    command_handler,
    double_time_handler,
    lyrics_handler,
    parse_tokens,
    property_handler,
    reading_handler,
    section_break_handler,
    single_time_handler,
)
from scoremap_models import BlankContent, CaptionContent, SentenceContent
from time_model import Duration, Timestamp


def _time(line_number: int, seconds: float) -> Token:
    return Token(line_number=line_number, kind=TokenKind.TIME, time=Timestamp.from_seconds(seconds))


def _in_lyrics(clock_seconds: float = 0.0) -> ParserCtx:
    return ParserCtx(parsing_lyrics=True, clock=Timestamp.from_seconds(clock_seconds))


def _window(note):
    return (note.duration.start_seconds, note.duration.end_seconds)


def test_handler_declines_foreign_tokens():
    queue = deque([Token(line_number=1, kind=TokenKind.LYRICS, text="歌")])
    ctx = _in_lyrics()
    assert command_handler(queue, ctx) is None
    assert caption_handler(queue, ctx) is None
    assert single_time_handler(queue, ctx) is None
    assert len(queue) == 1


def test_double_time_emits_one_blank_and_keeps_second_mark():
    queue = deque([_time(2, 1.0), _time(3, 2.0)])
    ctx = _in_lyrics()
    ctx.pending_lyrics = "歌"

    outcome = double_time_handler(queue, ctx)

    assert outcome is not None and outcome.note is not None
    assert isinstance(outcome.note.content, BlankContent)
    assert _window(outcome.note) == (1.0, 2.0)
    assert len(queue) == 1 and queue[0].line_number == 3
    assert ctx.pending_lyrics == "歌"


def test_double_time_declines_outside_lyrics_and_for_stale_marks():
    assert double_time_handler(deque([_time(1, 1.0), _time(2, 2.0)]), ParserCtx()) is None
    assert double_time_handler(deque([_time(1, 1.0), _time(2, 2.0)]), _in_lyrics(5.0)) is None
    assert double_time_handler(deque([_time(1, 3.0), _time(2, 2.0)]), _in_lyrics()) is None


def test_single_time_outside_lyrics_is_an_error():
    with pytest.raises(TimingDefinitionError) as excinfo:
        single_time_handler(deque([_time(7, 1.0)]), ParserCtx())
    assert excinfo.value.line_number == 7


def test_single_time_at_or_before_clock_is_ignored(debug_logs):
    ctx = _in_lyrics(4.0)
    ctx.pending_lyrics = "歌"
    queue = deque([_time(1, 4.0), _time(2, 3.0)])

    assert single_time_handler(queue, ctx) == Claimed()
    assert single_time_handler(queue, ctx) == Claimed()

    assert not queue
    assert ctx.clock == Timestamp.from_seconds(4.0)
    assert ctx.pending_lyrics == "歌"
    assert "ignoring timing mark" in debug_logs.text


def test_single_time_emits_idle_gap_only_for_an_empty_group():
    ctx = _in_lyrics()
    outcome = single_time_handler(deque([_time(1, 2.0)]), ctx)
    assert outcome is not None and outcome.note is not None
    assert _window(outcome.note) == (0.0, 2.0)
    assert ctx.clock == Timestamp.from_seconds(2.0)

    ctx.notes.append(outcome.note)
    ctx.last_note = outcome.note
    assert single_time_handler(deque([_time(2, 3.0)]), ctx) == Claimed()


def test_single_time_drops_lyrics_without_reading(caplog):
    ctx = _in_lyrics()
    ctx.pending_lyrics = "歌"
    single_time_handler(deque([_time(5, 1.0)]), ctx)
    assert ctx.pending_lyrics is None
    assert "without a reading" in caplog.text


def test_command_handler_block_state():
    ctx = ParserCtx()
    command_handler(deque([Token(line_number=1, kind=TokenKind.COMMAND, text="start")]), ctx)
    assert ctx.parsing_lyrics

    with pytest.raises(CommandError):
        command_handler(deque([Token(line_number=2, kind=TokenKind.COMMAND, text="start")]), ctx)

    command_handler(deque([Token(line_number=3, kind=TokenKind.COMMAND, text="break")]), ctx)
    command_handler(deque([Token(line_number=4, kind=TokenKind.COMMAND, text="end")]), ctx)
    assert not ctx.parsing_lyrics

    with pytest.raises(CommandError):
        command_handler(deque([Token(line_number=5, kind=TokenKind.COMMAND, text="end")]), ctx)
    with pytest.raises(CommandError) as excinfo:
        command_handler(deque([Token(line_number=6, kind=TokenKind.COMMAND, text="pause")]), ctx)
    assert excinfo.value.line_number == 6


@pytest.mark.parametrize("kind", [TokenKind.CAPTION, TokenKind.READING])
def test_caption_and_reading_require_lyrics_block(kind):
    queue = deque([Token(line_number=9, kind=kind, text="x")])
    handler = caption_handler if kind is TokenKind.CAPTION else reading_handler
    with pytest.raises(StatementDefinitionError) as excinfo:
        handler(queue, ParserCtx())
    assert excinfo.value.line_number == 9


def test_reading_requires_lyrics_first():
    with pytest.raises(StatementDefinitionError):
        reading_handler(deque([Token(line_number=1, kind=TokenKind.READING, text="か")]), _in_lyrics())


def test_reading_with_untypable_text_is_a_statement_error():
    ctx = _in_lyrics()
    ctx.pending_lyrics = "漢字"
    with pytest.raises(StatementDefinitionError):
        reading_handler(deque([Token(line_number=1, kind=TokenKind.READING, text="漢字")]), ctx)


def test_reading_emits_sentence_until_next_later_mark():
    ctx = _in_lyrics(1.0)
    ctx.pending_lyrics = "茶"
    queue = deque(
        [
            Token(line_number=3, kind=TokenKind.READING, text="ちゃ"),
            _time(4, 0.5),
            _time(5, 2.5),
        ]
    )
    outcome = reading_handler(queue, ctx)

    assert outcome is not None and outcome.note is not None
    assert isinstance(outcome.note.content, SentenceContent)
    assert outcome.note.content.sentence.origin == "茶"
    assert _window(outcome.note) == (1.0, 2.5)
    assert ctx.pending_lyrics is None


def test_calc_duration_defaults_to_one_second():
    ctx = _in_lyrics(2.0)
    assert calc_duration(deque(), ctx, 1) == Duration.between_seconds(2.0, 3.0)


@pytest.mark.parametrize("key", ["title", "bgm", "anything"])
def test_property_inside_lyrics_is_always_an_error(key):
    ctx = ParserCtx(parsing_lyrics=True, property_filter=lambda token: True)
    token = Token(line_number=2, kind=TokenKind.PROPERTY, key=key, text="Fine")
    with pytest.raises(PropertyDefinitionError):
        property_handler(deque([token]), ctx)


def test_property_filter_decides_what_is_stored():
    ctx = ParserCtx(property_filter=lambda token: token.key != "skip")
    property_handler(deque([Token(line_number=1, kind=TokenKind.PROPERTY, key="title", text="A")]), ctx)
    property_handler(deque([Token(line_number=2, kind=TokenKind.PROPERTY, key="skip", text="B")]), ctx)
    property_handler(deque([Token(line_number=3, kind=TokenKind.PROPERTY, key="title", text="C")]), ctx)
    assert ctx.metadata == {"title": "C"}


def test_lyrics_lines_concatenate():
    ctx = _in_lyrics()
    lyrics_handler(deque([Token(line_number=1, kind=TokenKind.LYRICS, text="本当")]), ctx)
    lyrics_handler(deque([Token(line_number=2, kind=TokenKind.LYRICS, text="に")]), ctx)
    assert ctx.pending_lyrics == "本当に"


def test_section_break_seals_group():
    ctx = _in_lyrics()
    section_break_handler(deque([Token(line_number=1, kind=TokenKind.SECTION_BREAK)]), ctx)
    assert ctx.groups == []

    outcome = single_time_handler(deque([_time(2, 1.0)]), ctx)
    ctx.notes.append(outcome.note)
    section_break_handler(deque([Token(line_number=3, kind=TokenKind.SECTION_BREAK)]), ctx)
    assert len(ctx.groups) == 1 and ctx.notes == []


def test_parse_tokens_double_time_pair_yields_exactly_one_blank():
    parsed = parse_tokens(lex("[start]\n*1\n*2\n[end]"))
    notes = [note for group in parsed.groups for note in group]
    assert len(notes) == 1
    assert isinstance(notes[0].content, BlankContent)
    assert _window(notes[0]) == (1.0, 2.0)


def test_parse_tokens_builds_groups_in_order():
    text = "\n".join(
        [
            "[start]",
            "*1",
            ">> intro",
            "*2",
            "茶",
            ":ちゃ",
            "---",
            "*4",
            "本",
            ":ほん",
            "*6",
            "[end]",
        ]
    )
    parsed = parse_tokens(lex(text))
    shapes = [[type(note.content) for note in group] for group in parsed.groups]
    assert shapes == [[BlankContent, CaptionContent, SentenceContent], [SentenceContent]]

    notes = [note for group in parsed.groups for note in group]
    assert [_window(note) for note in notes] == [(0.0, 1.0), (1.0, 2.0), (2.0, 4.0), (4.0, 6.0)]
    assert [note.id for note in notes] == sorted(note.id for note in notes)


def test_parse_tokens_rejects_token_no_handler_claims():
    with pytest.raises(ScoremapParseError):
        parse_tokens([Token(line_number=1, kind=TokenKind.TIME, time=None)])


def test_parse_tokens_warns_on_unclosed_block(caplog):
    parse_tokens(lex("[start]\n*1\n歌"))
    assert "missing end command" in caplog.text
    assert "no reading" in caplog.text


def test_double_time_declines_when_first_mark_equals_clock():
    queue = deque([_time(5, 3.0), _time(6, 6.0)])
    assert double_time_handler(queue, _in_lyrics(3.0)) is None
    assert len(queue) == 2


def test_repeated_mark_after_reading_does_not_overlap_sentence():
    parsed = parse_tokens(lex("[start]\n*0:03\n歌\n:うた\n*0:03\n*0:06\n[end]"))
    notes = [note for group in parsed.groups for note in group]
    assert [(type(note.content), _window(note)) for note in notes] == [
        (BlankContent, (0.0, 3.0)),
        (SentenceContent, (3.0, 6.0)),
    ]


def test_leading_double_mark_at_zero_still_yields_idle_blank():
    parsed = parse_tokens(lex("[start]\n*0:00\n*0:02\n[end]"))
    notes = [note for group in parsed.groups for note in group]
    assert [(type(note.content), _window(note)) for note in notes] == [(BlankContent, (0.0, 2.0))]
