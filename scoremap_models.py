# -*- coding: utf-8 -*-
########################
# scoremap_models.py
########################
# Purpose:
# - Data models for a parsed score: note ids, notes and their content, sections and music info.
#
# Design notes:
# - No Qt usage. Pure data definitions.
# - Note ids are opaque and never derived from content. Two notes with identical content have distinct ids.
# - Ids come from a NoteIdGenerator owned by one parse. The namespace is a process wide parse serial,
#   so ids are process unique while the per parse index stays reproducible in tests.
# - Section holds ids only. It is meaningless without the Scoremap that produced those ids.
#
########################
# Interfaces:
# Public dataclasses:
# - NoteId(namespace: int, index: int)
# - SentenceContent(sentence: Sentence)
# - CaptionContent(text: str)
# - BlankContent()
# - Note(id: NoteId, duration: Duration, content: NoteContent)
#   - sentence(duration, sentence, *, id_generator) / caption(duration, text, *, id_generator) / blank(duration, *, id_generator)
#   - is_sentence() -> bool
# - Section(from_id: NoteId, to_id: NoteId)
# - MusicInfo(title: str, song_author: str, score_author: str, bgm: Optional[str])
#
# Public classes:
# - class NoteIdGenerator
#   - next_id() -> NoteId
#
########################

from __future__ import annotations

from dataclasses import dataclass
import itertools
from typing import Optional, Union

from sentence import Sentence
from time_model import Duration

_PARSE_SERIAL = itertools.count(1)


@dataclass(frozen=True, order=True)
class NoteId:
    namespace: int
    index: int

    def __str__(self) -> str:
        return f"n{self.namespace}-{self.index}"


class NoteIdGenerator:
    def __init__(self) -> None:
        self._namespace = next(_PARSE_SERIAL)
        self._indices = itertools.count(0)

    def next_id(self) -> NoteId:
        return NoteId(namespace=self._namespace, index=next(self._indices))


_DEFAULT_ID_GENERATOR = NoteIdGenerator()


@dataclass(frozen=True)
class SentenceContent:
    sentence: Sentence


@dataclass(frozen=True)
class CaptionContent:
    text: str


@dataclass(frozen=True)
class BlankContent:
    pass


NoteContent = Union[SentenceContent, CaptionContent, BlankContent]


@dataclass(frozen=True)
class Note:
    id: NoteId
    duration: Duration
    content: NoteContent

    @classmethod
    def sentence(cls, duration: Duration, sentence: Sentence, *, id_generator: Optional[NoteIdGenerator] = None) -> "Note":
        generator = id_generator or _DEFAULT_ID_GENERATOR
        return cls(id=generator.next_id(), duration=duration, content=SentenceContent(sentence=sentence))

    @classmethod
    def caption(cls, duration: Duration, text: str, *, id_generator: Optional[NoteIdGenerator] = None) -> "Note":
        generator = id_generator or _DEFAULT_ID_GENERATOR
        return cls(id=generator.next_id(), duration=duration, content=CaptionContent(text=str(text)))

    @classmethod
    def blank(cls, duration: Duration, *, id_generator: Optional[NoteIdGenerator] = None) -> "Note":
        generator = id_generator or _DEFAULT_ID_GENERATOR
        return cls(id=generator.next_id(), duration=duration, content=BlankContent())

    def is_sentence(self) -> bool:
        return isinstance(self.content, SentenceContent)


@dataclass(frozen=True)
class Section:
    from_id: NoteId
    to_id: NoteId

    def is_terminal(self) -> bool:
        return self.from_id == self.to_id


@dataclass(frozen=True)
class MusicInfo:
    title: str
    song_author: str
    score_author: str
    bgm: Optional[str] = None
