import pytest

from score_errors import MalformedTimestampError
from score_lexer import Token, TokenKind, iter_tokens, lex, lex_line
from time_model import Timestamp


@pytest.mark.parametrize(
    "line, kind",
    [
        ("", TokenKind.COMMENT),
        ("   ", TokenKind.COMMENT),
        ("# a remark", TokenKind.COMMENT),
        ("*1:23.45", TokenKind.TIME),
        ("*83.45", TokenKind.TIME),
        ("[start]", TokenKind.COMMAND),
        ("[ END ]", TokenKind.COMMAND),
        (">> intro", TokenKind.CAPTION),
        (":ほんとう", TokenKind.READING),
        ("---", TokenKind.SECTION_BREAK),
        ("title = Song", TokenKind.PROPERTY),
        ("本当に", TokenKind.LYRICS),
        ("a = b = c", TokenKind.PROPERTY),
        ("歌 = うた", TokenKind.LYRICS),
    ],
)
def test_lex_line_kinds(line, kind):
    assert lex_line(1, line).kind is kind


def test_lex_line_payloads():
    assert lex_line(4, "*1:02.5") == Token(line_number=4, kind=TokenKind.TIME, time=Timestamp(milliseconds=62_500))
    assert lex_line(1, "[ Start ]").text == "start"
    assert lex_line(1, ">>  spoken intro ").text == "spoken intro"
    assert lex_line(1, ": かし").text == "かし"

    prop = lex_line(2, "  song_author =  Someone Else ")
    assert prop.key == "song_author"
    assert prop.value == "Someone Else"


def test_lex_numbers_lines_from_one():
    tokens = lex("# header\n\ntitle = x\n[start]")
    assert [token.line_number for token in tokens] == [1, 2, 3, 4]
    assert [token.kind for token in tokens] == [
        TokenKind.COMMENT,
        TokenKind.COMMENT,
        TokenKind.PROPERTY,
        TokenKind.COMMAND,
    ]


def test_malformed_timestamp_reports_line_number():
    with pytest.raises(MalformedTimestampError) as excinfo:
        lex("[start]\n*0:01\n*1:xx\n[end]")
    assert excinfo.value.line_number == 3
    assert str(excinfo.value).startswith("line 3: ")


def test_iter_tokens_is_lazy():
    tokens = iter_tokens("[start]\n*bad")
    first = next(tokens)
    assert first.kind is TokenKind.COMMAND
    with pytest.raises(MalformedTimestampError):
        next(tokens)


@pytest.mark.parametrize("separator", ["\x0c", "\x1c", "\x85", "\u2028", "\u2029"])
def test_unusual_separators_do_not_shift_line_numbers(separator):
    with pytest.raises(MalformedTimestampError) as excinfo:
        lex(f"[start]\n歌{separator}詞\n*1:xx")
    assert excinfo.value.line_number == 3

    tokens = lex(f"[start]\n歌{separator}詞\n[end]")
    assert [token.line_number for token in tokens] == [1, 2, 3]
    assert tokens[1].kind is TokenKind.LYRICS


def test_crlf_and_trailing_newline():
    tokens = lex("title = A\r\n[start]\r\n")
    assert [token.kind for token in tokens] == [TokenKind.PROPERTY, TokenKind.COMMAND]
    assert tokens[0].value == "A"
