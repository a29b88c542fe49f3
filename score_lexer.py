# -*- coding: utf-8 -*-
########################
# score_lexer.py
########################
# Purpose:
# - Turn raw score text into a flat, ordered sequence of tagged tokens, one per physical line.
#
# Design notes:
# - No Qt usage. Pure parsing.
# - Only primitive syntax is judged here (a timing mark must hold a valid timestamp).
#   Everything contextual (block state, ordering, property keys) is left to score_parser.py.
# - iter_tokens() is lazy: a malformed line raises only when the generator reaches it.
#
# Line grammar (leading and trailing whitespace is stripped first):
#   (empty) or "# ..."     -> COMMENT
#   "*1:23.45" / "*83.45"  -> TIME
#   "[start]"              -> COMMAND
#   ">> text"              -> CAPTION
#   ": reading"            -> READING
#   "---"                  -> SECTION_BREAK
#   "key = value"          -> PROPERTY  (key is an ASCII identifier)
#   anything else          -> LYRICS
#
########################
# Interfaces:
# Public enums:
# - class TokenKind(enum.Enum): TIME | COMMAND | CAPTION | PROPERTY | READING | SECTION_BREAK | LYRICS | COMMENT
#
# Public dataclasses:
# - Token(line_number: int, kind: TokenKind, text: str = "", key: str = "", time: Optional[Timestamp] = None)
#
# Public functions:
# - lex_line(line_number: int, raw_line: str) -> Token
# - iter_tokens(score_text: str) -> Iterator[Token]
# - lex(score_text: str) -> list[Token]
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
import re
from typing import Iterator, List, Optional

from score_errors import MalformedTimestampError
from time_model import Timestamp

COMMENT_SIGIL = "#"
TIME_SIGIL = "*"
CAPTION_SIGIL = ">>"
READING_SIGIL = ":"
SECTION_BREAK_SIGIL = "---"

_COMMAND_PATTERN = re.compile(r"^\[\s*([^\[\]]*?)\s*\]$")
_PROPERTY_PATTERN = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")


class TokenKind(enum.Enum):
    TIME = "time"
    COMMAND = "command"
    CAPTION = "caption"
    PROPERTY = "property"
    READING = "reading"
    SECTION_BREAK = "section_break"
    LYRICS = "lyrics"
    COMMENT = "comment"


@dataclass(frozen=True)
class Token:
    line_number: int
    kind: TokenKind
    text: str = ""
    key: str = ""
    time: Optional[Timestamp] = None

    @property
    def value(self) -> str:
        """Property value; an alias of text for PROPERTY tokens."""
        return self.text


def lex_line(line_number: int, raw_line: str) -> Token:
    line_text = str(raw_line).strip()

    if not line_text or line_text.startswith(COMMENT_SIGIL):
        return Token(line_number=line_number, kind=TokenKind.COMMENT)

    if line_text.startswith(TIME_SIGIL):
        try:
            stamp = Timestamp.parse(line_text[len(TIME_SIGIL):])
        except MalformedTimestampError as exc:
            raise exc.with_line_number(line_number) from exc
        return Token(line_number=line_number, kind=TokenKind.TIME, time=stamp)

    command_match = _COMMAND_PATTERN.match(line_text)
    if command_match is not None:
        return Token(line_number=line_number, kind=TokenKind.COMMAND, text=command_match.group(1).lower())

    if line_text.startswith(CAPTION_SIGIL):
        return Token(line_number=line_number, kind=TokenKind.CAPTION, text=line_text[len(CAPTION_SIGIL):].strip())

    if line_text.startswith(READING_SIGIL):
        return Token(line_number=line_number, kind=TokenKind.READING, text=line_text[len(READING_SIGIL):].strip())

    if line_text == SECTION_BREAK_SIGIL:
        return Token(line_number=line_number, kind=TokenKind.SECTION_BREAK)

    property_match = _PROPERTY_PATTERN.match(line_text)
    if property_match is not None:
        return Token(
            line_number=line_number,
            kind=TokenKind.PROPERTY,
            key=property_match.group(1),
            text=property_match.group(2).strip(),
        )

    return Token(line_number=line_number, kind=TokenKind.LYRICS, text=line_text)


def iter_tokens(score_text: str) -> Iterator[Token]:
    # Only "\n" ends a line; form feeds and unicode separators stay inside it.
    raw_lines = str(score_text).split("\n")
    if raw_lines and raw_lines[-1] == "":
        raw_lines.pop()
    for line_index, raw_line in enumerate(raw_lines):
        yield lex_line(line_index + 1, raw_line.rstrip("\r"))


def lex(score_text: str) -> List[Token]:
    return list(iter_tokens(score_text))


def _run_unit_tests() -> None:
    tokens = lex("title = Song\n[start]\n*0:01.5\n歌詞\n:かし\n>> intro\n---\n# note\n\n[end]")
    kinds = [token.kind for token in tokens]
    assert kinds == [
        TokenKind.PROPERTY,
        TokenKind.COMMAND,
        TokenKind.TIME,
        TokenKind.LYRICS,
        TokenKind.READING,
        TokenKind.CAPTION,
        TokenKind.SECTION_BREAK,
        TokenKind.COMMENT,
        TokenKind.COMMENT,
        TokenKind.COMMAND,
    ]
    assert tokens[0].key == "title" and tokens[0].value == "Song"
    assert tokens[2].time == Timestamp(milliseconds=1500)
    assert tokens[4].text == "かし"

    try:
        lex("[start]\n*1:xx")
    except MalformedTimestampError as exc:
        assert exc.line_number == 2
    else:
        raise AssertionError("Expected MalformedTimestampError on line 2")


if __name__ == "__main__":
    _run_unit_tests()
    print("score_lexer.py: ok")
