# -*- coding: utf-8 -*-
########################
# scoremap.py
########################
# Purpose:
# - Parse entry points for score text and score files.
# - Scoremap: the parse result and the sole owner of every Note it references.
# - Property validation and section derivation.
#
# Design notes:
# - No Qt usage. Pure parsing and data.
# - Parsing is all or nothing: the first ScoremapParseError aborts the load.
# - Sections are derived, never authored. Each pair of adjacent notes in id order yields one Section.
#   The last note pairs with itself so that it is playable too.
# - Section windows: [from.start, to.start) for a pair, [from.start, from.end) for the terminal section.
# - Property policy:
#   - Supported keys: title, song_author, score_author, bgm.
#   - Unsupported keys and invalid values fail the parse unless the load config says to drop them.
#
########################
# Interfaces:
# Public constants:
# - SUPPORTED_PROPERTIES: frozenset[str]
#
# Public classes:
# - class Scoremap
#   - metadata() -> dict[str, str]
#   - groups() -> list[list[Note]]
#   - notes() -> list[Note]
#   - note_by_id(note_id: NoteId) -> Note
#   - sections() -> list[Section]
#   - section_window(section: Section) -> tuple[float, float]
#   - music_info() -> MusicInfo
#
# Public functions:
# - build_property_filter(config: ScoremapLoadConfig) -> Callable[[Token], bool]
# - parse_scoremap(score_text: str, config: Optional[ScoremapLoadConfig] = None) -> Scoremap
# - load_scoremap(score_path: pathlib.Path, config: Optional[ScoremapLoadConfig] = None) -> Scoremap
#
# Inputs:
# - Score text or a UTF-8 score file, plus a ScoremapLoadConfig.
#
# Outputs:
# - Scoremap for game_activity.py.
#
########################

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import score_lexer
import score_parser
from config import ScoremapLoadConfig
from score_errors import PropertyDefinitionError, ScoremapLoadError
from score_lexer import Token
from scoremap_models import MusicInfo, Note, NoteId, Section

logger = logging.getLogger(__name__)

SUPPORTED_PROPERTIES = frozenset({"title", "song_author", "score_author", "bgm"})

_BGM_EXTENSIONS = (".wav", ".ogg", ".mp3", ".flac")


class Scoremap:
    def __init__(self, metadata: Dict[str, str], groups: List[List[Note]]) -> None:
        self._metadata: Dict[str, str] = dict(metadata)
        self._groups: List[List[Note]] = [list(group) for group in groups]
        self._notes: List[Note] = sorted(
            (note for group in self._groups for note in group),
            key=lambda note: note.id,
        )
        self._notes_by_id: Dict[NoteId, Note] = {note.id: note for note in self._notes}

    def __repr__(self) -> str:
        return f"Scoremap(title={self.music_info().title!r}, notes={len(self._notes)})"

    def metadata(self) -> Dict[str, str]:
        return dict(self._metadata)

    def groups(self) -> List[List[Note]]:
        return [list(group) for group in self._groups]

    def notes(self) -> List[Note]:
        return list(self._notes)

    def note_by_id(self, note_id: NoteId) -> Note:
        try:
            return self._notes_by_id[note_id]
        except KeyError as exc:
            raise KeyError(f"Note id {note_id} does not belong to this scoremap") from exc

    def sections(self) -> List[Section]:
        if not self._notes:
            return []
        sections = [Section(from_id=prev.id, to_id=note.id) for prev, note in zip(self._notes, self._notes[1:])]
        last_id = self._notes[-1].id
        sections.append(Section(from_id=last_id, to_id=last_id))
        return sections

    def section_window(self, section: Section) -> Tuple[float, float]:
        from_note = self.note_by_id(section.from_id)
        if section.is_terminal():
            return (from_note.duration.start_seconds, from_note.duration.end_seconds)
        to_note = self.note_by_id(section.to_id)
        return (from_note.duration.start_seconds, to_note.duration.start_seconds)

    def music_info(self) -> MusicInfo:
        return MusicInfo(
            title=self._metadata.get("title", "").strip() or "Untitled",
            song_author=self._metadata.get("song_author", "").strip(),
            score_author=self._metadata.get("score_author", "").strip(),
            bgm=self._metadata.get("bgm", "").strip() or None,
        )


def _property_problem(token: Token) -> Optional[str]:
    value = token.value.strip()
    if not value:
        return f"Property {token.key!r} needs a value."
    if token.key == "bgm" and not value.lower().endswith(_BGM_EXTENSIONS):
        return f"Property 'bgm' must name an audio file ({', '.join(_BGM_EXTENSIONS)}), got {value!r}."
    return None


def build_property_filter(config: ScoremapLoadConfig) -> Callable[[Token], bool]:
    def property_filter(token: Token) -> bool:
        if token.key not in SUPPORTED_PROPERTIES:
            if config.ignore_unsupported_property:
                logger.info("line %d: dropping unsupported property %r", token.line_number, token.key)
                return False
            raise PropertyDefinitionError(f"Unsupported property {token.key!r}.", line_number=token.line_number)

        problem = _property_problem(token)
        if problem is not None:
            if config.ignore_invalid_properties:
                logger.info("line %d: dropping invalid property %r: %s", token.line_number, token.key, problem)
                return False
            raise PropertyDefinitionError(problem, line_number=token.line_number)

        return True

    return property_filter


def parse_scoremap(score_text: str, config: Optional[ScoremapLoadConfig] = None) -> Scoremap:
    load_config = config if config is not None else ScoremapLoadConfig()
    parsed = score_parser.parse_tokens(
        score_lexer.iter_tokens(score_text),
        property_filter=build_property_filter(load_config),
    )
    scoremap = Scoremap(metadata=parsed.metadata, groups=parsed.groups)
    logger.debug("parsed %r with %d groups", scoremap, len(parsed.groups))
    return scoremap


def _read_text_utf8(file_path: Path) -> str:
    try:
        return file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ScoremapLoadError(f"Score file is not valid UTF-8: {file_path}") from exc
    except OSError as exc:
        raise ScoremapLoadError(f"Failed to read score file: {file_path}") from exc


def load_scoremap(score_path: Path, config: Optional[ScoremapLoadConfig] = None) -> Scoremap:
    score_text = _read_text_utf8(Path(score_path))
    return parse_scoremap(score_text, config)


def _run_unit_tests() -> None:
    score_text = "\n".join(
        [
            "title = Sample",
            "[start]",
            "*0:00",
            "茶",
            ":ちゃ",
            "*0:03",
            "[end]",
        ]
    )
    scoremap = parse_scoremap(score_text)
    assert len(scoremap.notes()) == 1
    assert len(scoremap.groups()) == 1
    note = scoremap.notes()[0]
    assert note.is_sentence()
    assert (note.duration.start_seconds, note.duration.end_seconds) == (0.0, 3.0)
    assert scoremap.music_info().title == "Sample"

    sections = scoremap.sections()
    assert len(sections) == 1
    assert scoremap.section_window(sections[0]) == (0.0, 3.0)

    try:
        parse_scoremap("genre = pop")
    except PropertyDefinitionError:
        pass
    else:
        raise AssertionError("Expected PropertyDefinitionError for unsupported property")

    lenient = parse_scoremap("genre = pop", ScoremapLoadConfig(ignore_unsupported_property=True))
    assert lenient.metadata() == {}


if __name__ == "__main__":
    _run_unit_tests()
    print("scoremap.py: ok")
