# -*- coding: utf-8 -*-
########################
# score_parser.py
########################
# Purpose:
# - Fold the token sequence from score_lexer.py into metadata and an ordered list of note groups.
# - Enforce the cross-token rules the lexer cannot see (block state, timing order, statement order).
#
# Design notes:
# - No Qt usage. Pure parsing.
# - Processing model: tokens sit in a queue; an ordered chain of handlers inspects the front.
#   A handler either returns None ("not mine") or removes its token and returns Claimed(note or None).
#   Errors are raised, and the first error aborts the parse. No partial result is ever returned.
# - Handlers are plain functions (queue, ctx) -> Optional[Claimed] so each one can be tested alone.
# - ParserCtx lives for one parse only and is never shared across threads.
# - Duration look-ahead only considers timing marks later than the running clock, because earlier
#   marks are ignored when reached. Every emitted note therefore has a non-empty duration.
#
########################
# Interfaces:
# Public dataclasses:
# - Claimed(note: Optional[Note] = None)
# - ParserCtx(metadata, groups, notes, parsing_lyrics, pending_lyrics, clock, id_generator, property_filter, last_note)
# - ParsedScore(metadata: dict[str, str], groups: list[list[Note]])
#
# Public functions (handlers, in priority order):
# - double_time_handler / single_time_handler / command_handler / caption_handler / property_handler
#   reading_handler / section_break_handler / lyrics_handler / comment_handler
#
# - calc_duration(queue, ctx, line_number) -> Duration
# - parse_tokens(tokens: Iterable[Token], *, property_filter: Optional[PropertyFilter] = None) -> ParsedScore
#
# Inputs:
# - Tokens from score_lexer.py.
# - Optional property filter from scoremap.py (decides which properties are stored, may raise).
#
# Outputs:
# - ParsedScore consumed by scoremap.py.
#
########################

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging
from typing import Callable, Deque, Dict, Iterable, List, Optional, Sequence

from romaji_table import UntypableReadingError
from score_errors import (
    CommandError,
    DurationInvalidError,
    PropertyDefinitionError,
    ScoremapParseError,
    StatementDefinitionError,
    TimingDefinitionError,
)
from score_lexer import Token, TokenKind
from scoremap_models import Note, NoteIdGenerator
from sentence import Sentence
from time_model import Duration, Timestamp

logger = logging.getLogger(__name__)

PropertyFilter = Callable[[Token], bool]

TokenQueue = Deque[Token]


@dataclass(frozen=True)
class Claimed:
    note: Optional[Note] = None


@dataclass
class ParserCtx:
    metadata: Dict[str, str] = field(default_factory=dict)
    groups: List[List[Note]] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    parsing_lyrics: bool = False
    pending_lyrics: Optional[str] = None
    clock: Timestamp = field(default_factory=Timestamp)
    id_generator: NoteIdGenerator = field(default_factory=NoteIdGenerator)
    property_filter: Optional[PropertyFilter] = None
    last_note: Optional[Note] = None

    def seal_group(self) -> None:
        if self.notes:
            self.groups.append(self.notes)
            self.notes = []


@dataclass(frozen=True)
class ParsedScore:
    metadata: Dict[str, str]
    groups: List[List[Note]]


def calc_duration(queue: TokenQueue, ctx: ParserCtx, line_number: int) -> Duration:
    """Duration from the running clock to the next later timing mark, or one second if none is left."""
    next_time: Optional[Timestamp] = None
    for token in queue:
        if token.kind is TokenKind.TIME and token.time is not None and token.time > ctx.clock:
            next_time = token.time
            break
    if next_time is None:
        next_time = ctx.clock.plus_seconds(1.0)
    try:
        return Duration(start=ctx.clock, end=next_time)
    except DurationInvalidError as exc:
        raise exc.with_line_number(line_number) from exc


def double_time_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    if len(queue) < 2:
        return None
    first, second = queue[0], queue[1]
    if first.kind is not TokenKind.TIME or second.kind is not TokenKind.TIME:
        return None
    if not ctx.parsing_lyrics or first.time is None or second.time is None:
        return None
    if not (ctx.clock < first.time < second.time):
        return None

    # Only the first mark is consumed; the second one starts the next unit.
    queue.popleft()
    blank = Note.blank(Duration(start=first.time, end=second.time), id_generator=ctx.id_generator)
    return Claimed(note=blank)


def single_time_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    token = queue[0]
    if token.kind is not TokenKind.TIME or token.time is None:
        return None
    queue.popleft()

    if not ctx.parsing_lyrics:
        raise TimingDefinitionError("Timing marks are only valid inside a lyrics block.", line_number=token.line_number)

    if token.time <= ctx.clock:
        logger.debug("line %d: ignoring timing mark %s at or before clock %s", token.line_number, token.time, ctx.clock)
        return Claimed()

    gap = Duration(start=ctx.clock, end=token.time)
    if ctx.pending_lyrics is not None:
        logger.warning("line %d: lyrics without a reading were dropped: %r", token.line_number, ctx.pending_lyrics)
    ctx.clock = token.time
    ctx.pending_lyrics = None

    gap_is_covered = ctx.last_note is not None and ctx.last_note.duration.end > gap.start
    if not ctx.notes and not gap_is_covered:
        return Claimed(note=Note.blank(gap, id_generator=ctx.id_generator))
    return Claimed()


def command_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    token = queue[0]
    if token.kind is not TokenKind.COMMAND:
        return None
    queue.popleft()

    command = token.text
    if command == "start":
        if ctx.parsing_lyrics:
            raise CommandError("The start command is only valid before an end command.", line_number=token.line_number)
        ctx.parsing_lyrics = True
    elif command == "end":
        if not ctx.parsing_lyrics:
            raise CommandError("The end command is only valid after a start command.", line_number=token.line_number)
        ctx.parsing_lyrics = False
    elif command == "break":
        pass
    else:
        raise CommandError(
            f"Only the start, break and end commands are valid, got {command!r}.",
            line_number=token.line_number,
        )
    return Claimed()


def caption_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    token = queue[0]
    if token.kind is not TokenKind.CAPTION:
        return None
    queue.popleft()

    if not ctx.parsing_lyrics:
        raise StatementDefinitionError("Captions are only valid inside a lyrics block.", line_number=token.line_number)

    duration = calc_duration(queue, ctx, token.line_number)
    return Claimed(note=Note.caption(duration, token.text, id_generator=ctx.id_generator))


def property_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    token = queue[0]
    if token.kind is not TokenKind.PROPERTY:
        return None
    queue.popleft()

    if ctx.parsing_lyrics:
        raise PropertyDefinitionError("Properties are only valid outside a lyrics block.", line_number=token.line_number)

    if ctx.property_filter is None or ctx.property_filter(token):
        ctx.metadata[token.key] = token.value
    return Claimed()


def reading_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    token = queue[0]
    if token.kind is not TokenKind.READING:
        return None
    queue.popleft()

    if not ctx.parsing_lyrics:
        raise StatementDefinitionError("Readings are only valid inside a lyrics block.", line_number=token.line_number)
    if ctx.pending_lyrics is None:
        raise StatementDefinitionError("A reading must come after its lyrics.", line_number=token.line_number)

    try:
        sentence = Sentence(ctx.pending_lyrics, token.text)
    except UntypableReadingError as exc:
        raise StatementDefinitionError(f"Reading cannot be typed: {exc}", line_number=token.line_number) from exc

    duration = calc_duration(queue, ctx, token.line_number)
    ctx.pending_lyrics = None
    return Claimed(note=Note.sentence(duration, sentence, id_generator=ctx.id_generator))


def section_break_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    if queue[0].kind is not TokenKind.SECTION_BREAK:
        return None
    queue.popleft()
    ctx.seal_group()
    return Claimed()


def lyrics_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    token = queue[0]
    if token.kind is not TokenKind.LYRICS:
        return None
    queue.popleft()
    ctx.pending_lyrics = token.text if ctx.pending_lyrics is None else ctx.pending_lyrics + token.text
    return Claimed()


def comment_handler(queue: TokenQueue, ctx: ParserCtx) -> Optional[Claimed]:
    if queue[0].kind is not TokenKind.COMMENT:
        return None
    queue.popleft()
    return Claimed()


Handler = Callable[[TokenQueue, ParserCtx], Optional[Claimed]]

HANDLERS: Sequence[Handler] = (
    double_time_handler,
    single_time_handler,
    command_handler,
    caption_handler,
    property_handler,
    reading_handler,
    section_break_handler,
    lyrics_handler,
    comment_handler,
)


def _dispatch(queue: TokenQueue, ctx: ParserCtx) -> Claimed:
    for handler in HANDLERS:
        outcome = handler(queue, ctx)
        if outcome is not None:
            return outcome
    front = queue[0]
    raise ScoremapParseError(f"No handler for token kind {front.kind.value!r}", line_number=front.line_number)


def parse_tokens(tokens: Iterable[Token], *, property_filter: Optional[PropertyFilter] = None) -> ParsedScore:
    queue: TokenQueue = deque(tokens)
    ctx = ParserCtx(property_filter=property_filter)

    while queue:
        outcome = _dispatch(queue, ctx)
        if outcome.note is not None:
            ctx.notes.append(outcome.note)
            ctx.last_note = outcome.note

    ctx.seal_group()

    if ctx.parsing_lyrics:
        logger.warning("score ended inside a lyrics block; missing end command")
    if ctx.pending_lyrics is not None:
        logger.warning("score ended with lyrics that have no reading: %r", ctx.pending_lyrics)

    return ParsedScore(metadata=dict(ctx.metadata), groups=ctx.groups)
