# -*- coding: utf-8 -*-
########################
# section_scheduler.py
########################
# Purpose:
# - Organize a Scoremap's derived sections into an ordered schedule for the game engine.
# - Tracks per-section typing state (entered, finished, completed, mistypes).
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Schedule order is the Scoremap section order, which is chronological and non-overlapping.
# - Each scheduled sentence is a rebuilt copy of the note's sentence, so typing progress belongs to
#   one game session and the Scoremap itself is never mutated.
# - The scheduler owns the section list and its state; GameActivity queries and marks it.
#
########################
# Interfaces:
# Public dataclasses:
# - ScheduledSection(
#     section: Section,
#     note: Note,
#     start_seconds: float,
#     end_seconds: float,
#     sentence: Optional[Sentence],
#     is_finished: bool = False,
#     is_completed: bool = False,
#     mistyped_count: int = 0,
#   )
#   - caption() -> Optional[str]
#   - has_typing_content() -> bool
#   - is_achieved() -> bool
#   - elapsed_ratio(time_seconds: float) -> float
#
# Public classes:
# - class SectionScheduler
#   - __init__(scoremap: Scoremap)
#   - scheduled_sections() -> list[ScheduledSection]
#   - reset() -> None
#   - has_pending() -> bool
#   - next_pending() -> Optional[ScheduledSection]
#   - enter_next_if_started(*, song_time_seconds: float) -> Optional[ScheduledSection]
#   - mark_finished(scheduled_section: ScheduledSection) -> None
#   - finished_sections() -> list[ScheduledSection]
#   - end_seconds() -> float
#
# Inputs:
# - Scoremap and time parameters.
#
# Outputs:
# - ScheduledSection views for GameActivity.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from scoremap import Scoremap
from scoremap_models import CaptionContent, Note, Section, SentenceContent
from sentence import Sentence


@dataclass
class ScheduledSection:
    section: Section
    note: Note
    start_seconds: float
    end_seconds: float
    sentence: Optional[Sentence]
    is_finished: bool = False
    is_completed: bool = False
    mistyped_count: int = 0

    def caption(self) -> Optional[str]:
        if isinstance(self.note.content, CaptionContent):
            return self.note.content.text
        return None

    def has_typing_content(self) -> bool:
        return self.sentence is not None

    def is_achieved(self) -> bool:
        return self.is_finished and (self.is_completed or not self.has_typing_content())

    def elapsed_ratio(self, time_seconds: float) -> float:
        length = float(self.end_seconds) - float(self.start_seconds)
        if length <= 0.0:
            return 1.0
        ratio = (float(time_seconds) - float(self.start_seconds)) / length
        return min(1.0, max(0.0, ratio))


def _schedule(scoremap: Scoremap, section: Section) -> ScheduledSection:
    note = scoremap.note_by_id(section.from_id)
    start_seconds, end_seconds = scoremap.section_window(section)
    sentence = note.content.sentence.rebuilt() if isinstance(note.content, SentenceContent) else None
    return ScheduledSection(
        section=section,
        note=note,
        start_seconds=float(start_seconds),
        end_seconds=float(end_seconds),
        sentence=sentence,
    )


class SectionScheduler:
    def __init__(self, scoremap: Scoremap) -> None:
        self._scoremap = scoremap
        self._scheduled_sections = [_schedule(scoremap, section) for section in scoremap.sections()]
        self._next_index = 0

    def scheduled_sections(self) -> List[ScheduledSection]:
        return list(self._scheduled_sections)

    def reset(self) -> None:
        self._scheduled_sections = [_schedule(self._scoremap, section) for section in self._scoremap.sections()]
        self._next_index = 0

    def has_pending(self) -> bool:
        return self._next_index < len(self._scheduled_sections)

    def next_pending(self) -> Optional[ScheduledSection]:
        if self.has_pending():
            return self._scheduled_sections[self._next_index]
        return None

    def enter_next_if_started(self, *, song_time_seconds: float) -> Optional[ScheduledSection]:
        pending = self.next_pending()
        if pending is None or float(song_time_seconds) < float(pending.start_seconds):
            return None
        self._next_index += 1
        return pending

    def mark_finished(self, scheduled_section: ScheduledSection) -> None:
        scheduled_section.is_finished = True

    def finished_sections(self) -> List[ScheduledSection]:
        return [item for item in self._scheduled_sections if item.is_finished]

    def end_seconds(self) -> float:
        if not self._scheduled_sections:
            return 0.0
        return float(self._scheduled_sections[-1].end_seconds)


def _run_unit_tests() -> None:
    import scoremap as scoremap_module

    score_text = "[start]\n*1\n>> intro\n*2\n茶\n:ちゃ\n*4\n[end]"
    scheduler = SectionScheduler(scoremap_module.parse_scoremap(score_text))
    windows = [(item.start_seconds, item.end_seconds) for item in scheduler.scheduled_sections()]
    assert windows == [(0.0, 1.0), (1.0, 2.0), (2.0, 4.0)], windows

    assert scheduler.enter_next_if_started(song_time_seconds=0.0) is not None
    assert scheduler.enter_next_if_started(song_time_seconds=0.5) is None
    caption_section = scheduler.enter_next_if_started(song_time_seconds=1.0)
    assert caption_section is not None and caption_section.caption() == "intro"
    sentence_section = scheduler.enter_next_if_started(song_time_seconds=3.0)
    assert sentence_section is not None and sentence_section.has_typing_content()
    assert not scheduler.has_pending()


if __name__ == "__main__":
    _run_unit_tests()
    print("section_scheduler.py: ok")
